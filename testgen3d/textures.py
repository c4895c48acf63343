"""Procedural test textures.

Every function is a pure function of its arguments and returns a square
(s, s, 4) buffer indexed [row j, column i]: uint8 RGBA for the LDR charts,
float32 RGBA for ``make_gammarampf``.
"""

from __future__ import annotations

import numpy as np

DARK = 90
LIGHT = 128
BORDER = 196
CELL = 64
GAMMA = 2.2


def _check_size(s: int, minimum: int = 1) -> None:
    if s < minimum:
        raise ValueError(f"texture size must be >= {minimum}, got {s}")


def _coords(s: int) -> tuple[np.ndarray, np.ndarray]:
    j, i = np.indices((s, s))
    return i, j


def _gray(value: np.ndarray) -> np.ndarray:
    out = np.empty(value.shape + (4,), dtype=np.uint8)
    out[..., :3] = value[..., None]
    out[..., 3] = 255
    return out


def _parity(i: np.ndarray, j: np.ndarray, cell: int) -> np.ndarray:
    return (i // cell + j // cell) % 2 == 1


def make_grid(s: int, cell: int = CELL) -> np.ndarray:
    _check_size(s)
    if cell < 2:
        raise ValueError(f"cell must be >= 2, got {cell}")
    i, j = _coords(s)
    border = (i % cell == 0) | (i % cell == cell - 1) | (j % cell == 0) | (j % cell == cell - 1)
    return _gray(np.where(border, DARK, LIGHT).astype(np.uint8))


def make_checker(s: int) -> np.ndarray:
    _check_size(s)
    i, j = _coords(s)
    return _gray(np.where(_parity(i, j, CELL), DARK, LIGHT).astype(np.uint8))


def _interior(i: np.ndarray, j: np.ndarray) -> np.ndarray:
    return (i % 32 != 0) & (j % 32 != 0)


def _nested_value(i: np.ndarray, j: np.ndarray, fine: bool) -> np.ndarray:
    """Checker value around 128 with +-16 (64 px), and when fine +-4 (16 px) and +-1 (4 px)."""
    value = np.full(i.shape, 128, dtype=np.int32)
    steps = ((64, 16), (16, 4), (4, 1)) if fine else ((64, 16),)
    for cell, delta in steps:
        value += np.where(_parity(i, j, cell), delta, -delta)
    return value


def make_rchecker(s: int) -> np.ndarray:
    _check_size(s)
    i, j = _coords(s)
    value = np.where(_interior(i, j), _nested_value(i, j, fine=True), BORDER)
    return _gray(value.astype(np.uint8))


def hsv_to_rgb(h, s, v) -> np.ndarray:
    """8-bit HSV to RGB, six-region integer formula. Broadcasts over arrays.

    Returns uint8 with a trailing axis of 3.
    """
    h = np.asarray(h, dtype=np.int32)
    s = np.asarray(s, dtype=np.int32)
    v = np.asarray(v, dtype=np.int32)
    h, s, v = np.broadcast_arrays(h, s, v)

    region = h // 43
    remainder = (h - region * 43) * 6
    p = (v * (255 - s)) >> 8
    q = (v * (255 - ((s * remainder) >> 8))) >> 8
    t = (v * (255 - ((s * (255 - remainder)) >> 8))) >> 8

    table = [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ]
    region = np.minimum(region, 5)
    rgb = np.zeros(h.shape + (3,), dtype=np.int32)
    for k, channels in enumerate(table):
        sel = region == k
        for c in range(3):
            rgb[..., c] = np.where(sel, channels[c], rgb[..., c])
    gray = s == 0
    for c in range(3):
        rgb[..., c] = np.where(gray, v, rgb[..., c])
    return rgb.astype(np.uint8)


def _colored(s: int, fine: bool) -> np.ndarray:
    _check_size(s, 8)
    i, j = _coords(s)
    block = s // 8
    hue = 32 * (i // block)
    sat = 64 + 16 * (7 - j // block)
    inside = _interior(i, j)
    value = np.where(inside, _nested_value(i, j, fine=fine), BORDER)
    sat = np.where(inside, sat, 32)
    # hue and saturation wrap like 8-bit registers when s is not a multiple of 8
    rgb = hsv_to_rgb(hue & 0xFF, sat & 0xFF, value)
    out = np.empty((s, s, 4), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = 255
    return out


def make_colored(s: int) -> np.ndarray:
    return _colored(s, fine=False)


def make_rcolored(s: int) -> np.ndarray:
    return _colored(s, fine=True)


def _gamma_values(s: int) -> np.ndarray:
    _check_size(s, 2)
    i, j = _coords(s)
    u = (j / np.float32(s - 1)).astype(np.float32)
    u = np.where(i < s // 3, np.power(u, np.float32(GAMMA)), u)
    u = np.where(i > (s * 2) // 3, np.power(u, np.float32(1.0 / GAMMA)), u)
    return u.astype(np.float32)


def make_gammaramp(s: int) -> np.ndarray:
    """Left third u^2.2, middle linear, right third u^(1/2.2); u runs down the rows."""
    c = (_gamma_values(s) * 255).astype(np.uint8)
    return _gray(c)


def make_gammarampf(s: int) -> np.ndarray:
    u = _gamma_values(s)
    out = np.ones((s, s, 4), dtype=np.float32)
    out[..., :3] = u[..., None]
    return out
