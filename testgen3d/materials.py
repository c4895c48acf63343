from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .rng import random_stream, uniform


class MaterialKind(str, enum.Enum):
    DIFFUSE = "diffuse"
    METAL = "metal"
    PLASTIC = "plastic"


@dataclass(frozen=True)
class MaterialSpec:
    name: str
    kind: MaterialKind
    color: Tuple[float, float, float]
    roughness: float = 0.0
    texture: str | None = None


def random_materials(count: int, textures: Sequence[str], rng: np.random.Generator | None = None) -> List[MaterialSpec]:
    """Material 0 is a white textured floor; the rest are drawn at random.

    Half of the materials pick a texture slot int(6u) - 1, where -1 means
    untextured. Textured materials are white so the texture shows unmodified.
    """
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    if not textures:
        raise ValueError("at least one texture name is required")
    rng = rng if rng is not None else random_stream()
    materials = [MaterialSpec("floor", MaterialKind.DIFFUSE, (1.0, 1.0, 1.0), texture=textures[0])]
    for i in range(1, count):
        slot = -1
        if uniform(rng) < 0.5:
            slot = min(int(uniform(rng) * 6), len(textures)) - 1
        if slot >= 0:
            color = (1.0, 1.0, 1.0)
        else:
            color = tuple(0.2 + 0.3 * uniform(rng) for _ in range(3))
        roughness = 0.01 + 0.25 * uniform(rng)
        pick = int(uniform(rng) * 4)
        if pick == 0:
            kind = MaterialKind.DIFFUSE
            roughness = 0.0
        elif pick == 1:
            kind = MaterialKind.METAL
        else:
            kind = MaterialKind.PLASTIC
        materials.append(
            MaterialSpec(
                name=f"obj{i:02d}",
                kind=kind,
                color=color,
                roughness=roughness,
                texture=textures[slot] if slot >= 0 else None,
            )
        )
    return materials
