from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import numpy as np


class ShapeKind(str, enum.Enum):
    """Tessellation strategy tags understood by the geometry builder."""

    UVSPHERE = "uvsphere"
    UVSPHERECUBE = "uvspherecube"
    UVSPHERIZEDCUBE = "uvspherizedcube"
    UVFLIPCAPSPHERE = "uvflipcapsphere"
    UVCUBE = "uvcube"
    UVFLOOR = "uvfloor"


def axis_rotation(axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation matrix about a (not necessarily unit) axis."""
    axis = np.asarray(axis, dtype=float)
    axis = axis / (np.linalg.norm(axis) + 1e-12)
    x, y, z = axis
    c, s = math.cos(angle), math.sin(angle)
    k = np.array([[0, -z, y], [z, 0, -x], [-y, x, 0]])
    return np.eye(3) * c + s * k + (1 - c) * np.outer(axis, axis)


@dataclass
class LineShape:
    """Polyline buffers: one row of `lines` per segment."""

    lines: np.ndarray
    pos: np.ndarray
    norm: np.ndarray
    texcoord: np.ndarray
    radius: np.ndarray

    @property
    def num_vertices(self) -> int:
        return int(self.pos.shape[0])


@dataclass
class PointShape:
    points: np.ndarray
    pos: np.ndarray
    norm: np.ndarray
    texcoord: np.ndarray
    radius: np.ndarray

    @property
    def num_vertices(self) -> int:
        return int(self.pos.shape[0])


def line_topology(steps: int, num: int) -> tuple[np.ndarray, np.ndarray]:
    """Segment indices and (u, v) parameters for `num` polylines of `steps` segments.

    Vertex i of polyline j lives at j * (steps + 1) + i, with u = i / steps
    and v = j / num.
    """
    if steps < 1 or num < 1:
        raise ValueError(f"steps and num must be >= 1, got steps={steps}, num={num}")
    i = np.arange(steps + 1)
    j = np.arange(num)
    uv = np.stack(
        [
            np.tile(i / steps, num),
            np.repeat(j / num, steps + 1),
        ],
        axis=1,
    )
    start = (j[:, None] * (steps + 1) + np.arange(steps)[None, :]).reshape(-1)
    lines = np.stack([start, start + 1], axis=1).astype(np.int64)
    return lines, uv


def compute_line_tangents(lines: np.ndarray, pos: np.ndarray) -> np.ndarray:
    """Per-vertex tangents from segment directions, length weighted."""
    norm = np.zeros_like(pos, dtype=float)
    seg = pos[lines[:, 1]] - pos[lines[:, 0]]
    np.add.at(norm, lines[:, 0], seg)
    np.add.at(norm, lines[:, 1], seg)
    length = np.linalg.norm(norm, axis=1, keepdims=True)
    return np.divide(norm, length, out=np.zeros_like(norm), where=length > 0)
