"""Hair-like strand bundles and random point clouds.

Strands grow outward from random points on the unit sphere. Every vertex is
evaluated from the per-strand tables drawn up front, in this order:

1. base position, stretched along the strand by its length multiplier;
2. optional per-axis jitter (three draws per vertex, vertex order);
3. optional bend about +Y by ``bend * u**2``;
4. optional clumping towards the nearest of the first ``guide_count`` strands,
   weighted by ``clump * u**2``;
5. component-wise scale.

Only step 2 draws after the tables are built, so the tables are read-only
during evaluation. Normals are tangents recomputed from the final polylines.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .geometry import LineShape, PointShape, axis_rotation, compute_line_tangents, line_topology
from .rng import random_stream, sphere_points

log = logging.getLogger(__name__)

BEND_AXIS = np.array([0.0, 1.0, 0.0])
GUIDE_COUNT = 128
_GUIDE_CHUNK = 4096


@dataclass(frozen=True)
class StrandParams:
    count: int
    steps: int = 4
    noise: float = 0.0
    clump: float = 0.0
    bend: float = 0.0
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    length_range: Tuple[float, float] = (0.15, 0.30)
    guide_count: int = GUIDE_COUNT

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"count must be >= 1, got {self.count}")
        if self.steps < 1:
            raise ValueError(f"steps must be >= 1, got {self.steps}")
        if self.noise < 0:
            raise ValueError(f"noise must be >= 0, got {self.noise}")
        if not 0.0 <= self.clump <= 1.0:
            raise ValueError(f"clump must be in [0, 1], got {self.clump}")
        if not math.isfinite(self.bend):
            raise ValueError(f"bend must be finite, got {self.bend}")
        if len(self.scale) != 3 or any(s <= 0 for s in self.scale):
            raise ValueError(f"scale must be three positive values, got {self.scale}")
        lo, hi = self.length_range
        if lo < 0 or hi < lo:
            raise ValueError(f"invalid length_range {self.length_range}")
        if self.guide_count < 1:
            raise ValueError(f"guide_count must be >= 1, got {self.guide_count}")


@dataclass(frozen=True)
class StrandDescriptor:
    direction: np.ndarray
    length: float


@dataclass(frozen=True)
class StrandTables:
    """Per-strand data shared by every vertex evaluation."""

    base: np.ndarray
    length: np.ndarray
    guide: np.ndarray = field(repr=False)

    def descriptors(self) -> List[StrandDescriptor]:
        return [StrandDescriptor(direction=b, length=float(l)) for b, l in zip(self.base, self.length)]


NOISY = StrandParams(count=64 * 64 * 16, noise=0.1, scale=(0.5, 0.5, 0.5))
CLUMPED = StrandParams(count=64 * 64 * 16, clump=0.75, scale=(0.5, 0.5, 0.5))
BENT = StrandParams(count=64 * 64 * 16, bend=0.5, scale=(0.5, 0.5, 0.5))
PRESETS = {"noisy": NOISY, "clumped": CLUMPED, "bent": BENT}


def nearest_guides(base: np.ndarray, guide_count: int) -> np.ndarray:
    """Index of the closest of the first `guide_count` bases for every strand.

    Strands inside the guide set map to themselves; ties go to the lowest index.
    """
    n = base.shape[0]
    guides = base[:guide_count]
    out = np.arange(n)
    for start in range(guide_count + 1, n, _GUIDE_CHUNK):
        chunk = base[start : start + _GUIDE_CHUNK]
        dist = np.linalg.norm(chunk[:, None, :] - guides[None, :, :], axis=2)
        out[start : start + chunk.shape[0]] = np.argmin(dist, axis=1)
    return out


def build_tables(params: StrandParams, rng: np.random.Generator) -> StrandTables:
    """Draw count + 1 strands, three uniforms each in the order z, phi, length."""
    draws = rng.random((params.count + 1, 3))
    base = sphere_points(draws[:, 0], draws[:, 1])
    lo, hi = params.length_range
    length = lo + (hi - lo) * draws[:, 2]
    guide = nearest_guides(base, params.guide_count) if params.clump > 0 else np.arange(params.count + 1)
    return StrandTables(base=base, length=length, guide=guide)


def strand_descriptors(count: int, rng: np.random.Generator | None = None) -> List[StrandDescriptor]:
    rng = rng if rng is not None else random_stream()
    return build_tables(StrandParams(count=count), rng).descriptors()


def strand_index(v: np.ndarray, count: int) -> np.ndarray:
    """Strand selected by the v parameter: clamp(round(v * (count + 1)), 0, count)."""
    idx = np.floor(np.asarray(v, dtype=float) * (count + 1) + 0.5).astype(np.int64)
    return np.clip(idx, 0, count)


def strand_positions(
    params: StrandParams,
    tables: StrandTables,
    uv: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    u = uv[:, 0]
    idx = strand_index(uv[:, 1], params.count)
    pos = tables.base[idx] * (1.0 + u * tables.length[idx])[:, None]

    if params.noise > 0:
        pos = pos + params.noise * (0.5 - rng.random((pos.shape[0], 3)))

    if params.bend != 0:
        for value in np.unique(u):
            if value == 0:
                continue
            sel = u == value
            rot = axis_rotation(BEND_AXIS, params.bend * value * value)
            pos[sel] = pos[sel] @ rot.T

    if params.clump > 0:
        clumped = idx > params.guide_count
        if np.any(clumped):
            g = tables.guide[idx[clumped]]
            uc = u[clumped]
            guide_pos = tables.base[g] * (1.0 + uc * tables.length[g])[:, None]
            w = (params.clump * uc * uc)[:, None]
            pos[clumped] = pos[clumped] * (1.0 - w) + guide_pos * w

    return pos * np.asarray(params.scale, dtype=float)


def generate_strands(params: StrandParams, rng: np.random.Generator | None = None) -> LineShape:
    rng = rng if rng is not None else random_stream()
    tables = build_tables(params, rng)
    lines, uv = line_topology(params.steps, params.count)
    pos = strand_positions(params, tables, uv, rng)
    radius = 0.001 + 0.001 * (1.0 - uv[:, 0])
    shape = LineShape(
        lines=lines,
        pos=pos,
        norm=np.tile([0.0, 0.0, 1.0], (pos.shape[0], 1)),
        texcoord=uv.copy(),
        radius=radius,
    )
    shape.norm = compute_line_tangents(shape.lines, shape.pos)
    log.debug("generated %d strands, %d vertices", params.count, shape.num_vertices)
    return shape


def generate_points(
    count: int,
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0),
    rng: np.random.Generator | None = None,
) -> PointShape:
    """Uniform points in the scaled unit cube."""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    rng = rng if rng is not None else random_stream()
    pos = rng.random((count, 3)) * np.asarray(scale, dtype=float)
    u = np.arange(count) / count
    return PointShape(
        points=np.arange(count, dtype=np.int64),
        pos=pos,
        norm=np.tile([0.0, 0.0, 1.0], (count, 1)),
        texcoord=np.stack([u, np.zeros(count)], axis=1),
        radius=np.full(count, 0.0025),
    )
