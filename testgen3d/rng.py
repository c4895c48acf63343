from __future__ import annotations

import math

import numpy as np

DEFAULT_SEED = 0x853C49E6


def random_stream(seed: int | None = DEFAULT_SEED) -> np.random.Generator:
    """Fresh PCG64 stream. Every generator call owns one; nothing is global."""
    if seed is None:
        seed = DEFAULT_SEED
    return np.random.Generator(np.random.PCG64(seed))


def uniform(rng: np.random.Generator) -> float:
    return float(rng.random())


def sphere_point(rng: np.random.Generator) -> np.ndarray:
    """Uniform point on the unit sphere (two draws, z first)."""
    z = -1.0 + 2.0 * uniform(rng)
    r = math.sqrt(max(0.0, 1.0 - z * z))
    phi = 2.0 * math.pi * uniform(rng)
    return np.array([r * math.cos(phi), r * math.sin(phi), z])


def sphere_points(u_z: np.ndarray, u_phi: np.ndarray) -> np.ndarray:
    """Vectorised form of sphere_point over pre-drawn uniforms."""
    z = -1.0 + 2.0 * u_z
    r = np.sqrt(np.clip(1.0 - z * z, 0.0, 1.0))
    phi = 2.0 * math.pi * u_phi
    return np.stack([r * np.cos(phi), r * np.sin(phi), z], axis=-1)
