from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

from .geometry import LineShape, PointShape

log = logging.getLogger(__name__)


def ensure_dir(path: str | os.PathLike) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def _check_rgba(pixels: np.ndarray, dtype) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"expected an (h, w, 4) RGBA buffer, got shape {pixels.shape}")
    if pixels.dtype != dtype:
        raise ValueError(f"expected dtype {np.dtype(dtype)}, got {pixels.dtype}")


def write_png(path: str | os.PathLike, pixels: np.ndarray) -> None:
    path = Path(path)
    _check_rgba(pixels, np.uint8)
    ensure_dir(path.parent)
    Image.fromarray(np.ascontiguousarray(pixels)).save(path)
    log.info("wrote %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])


def _float_to_rgbe(rgb: np.ndarray) -> np.ndarray:
    """Ward shared-exponent encoding, one 4-byte pixel per float triple."""
    rgb = np.maximum(rgb.astype(np.float64), 0.0)
    brightest = rgb.max(axis=-1)
    mantissa, exponent = np.frexp(brightest)
    scale = np.divide(mantissa * 256.0, brightest, out=np.zeros_like(brightest), where=brightest > 1e-32)
    out = np.zeros(rgb.shape[:-1] + (4,), dtype=np.uint8)
    out[..., :3] = np.minimum(rgb * scale[..., None], 255).astype(np.uint8)
    out[..., 3] = np.where(brightest > 1e-32, exponent + 128, 0).astype(np.uint8)
    return out


def write_hdr(path: str | os.PathLike, pixels: np.ndarray) -> None:
    """Radiance .hdr with flat (non run-length) scanlines; alpha is dropped."""
    path = Path(path)
    _check_rgba(pixels, np.float32)
    ensure_dir(path.parent)
    height, width = pixels.shape[:2]
    with path.open("wb") as f:
        f.write(b"#?RADIANCE\n")
        f.write(b"FORMAT=32-bit_rle_rgbe\n")
        f.write(b"\n")
        f.write(f"-Y {height} +X {width}\n".encode("ascii"))
        f.write(_float_to_rgbe(pixels[..., :3]).tobytes())
    log.info("wrote %s (%dx%d)", path, width, height)


def write_ply(path: str | os.PathLike, shape: PointShape | LineShape) -> None:
    path = Path(path)
    ensure_dir(path.parent)
    count = shape.num_vertices
    header = [
        "ply",
        "format ascii 1.0",
        f"element vertex {count}",
        "property float x",
        "property float y",
        "property float z",
        "property float nx",
        "property float ny",
        "property float nz",
        "property float u",
        "property float v",
        "property float radius",
    ]
    edges = shape.lines if isinstance(shape, LineShape) else None
    if edges is not None:
        header.extend(
            [
                f"element edge {len(edges)}",
                "property int vertex1",
                "property int vertex2",
            ]
        )
    header.append("end_header")

    with path.open("w") as f:
        f.write("\n".join(header) + "\n")
        for p, n, t, r in zip(shape.pos, shape.norm, shape.texcoord, shape.radius):
            f.write(
                f"{p[0]:.6f} {p[1]:.6f} {p[2]:.6f} {n[0]:.6f} {n[1]:.6f} {n[2]:.6f} "
                f"{t[0]:.6f} {t[1]:.6f} {r:.6f}\n"
            )
        if edges is not None:
            for a, b in edges:
                f.write(f"{int(a)} {int(b)}\n")
    log.info("wrote %s (%d vertices)", path, count)


def write_meta(path: str | os.PathLike, meta: Any) -> None:
    path = Path(path)
    ensure_dir(path.parent)
    with path.open("w") as f:
        json.dump(meta, f, indent=2, ensure_ascii=False)
