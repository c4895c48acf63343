from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .geometry import ShapeKind
from .materials import MaterialSpec
from .packing import PlacedShape, PlacementRecord


@dataclass
class Layout:
    """Placed shapes plus the materials bound to them, ready for scene assembly."""

    floor: PlacementRecord
    floor_kind: ShapeKind
    shapes: List[PlacedShape] = field(default_factory=list)
    materials: List[MaterialSpec] = field(default_factory=list)

    def material_for(self, index: int) -> MaterialSpec | None:
        if not self.materials:
            return None
        return self.materials[index % len(self.materials)]

    def min_clearance(self) -> float:
        """Smallest center distance minus radii over all shape pairs (inf for < 2 shapes)."""
        best = float("inf")
        pos = [np.asarray(s.record.position) for s in self.shapes]
        for i in range(len(pos)):
            for j in range(i + 1, len(pos)):
                gap = float(np.linalg.norm(pos[i] - pos[j])) - self.shapes[i].record.radius - self.shapes[j].record.radius
                best = min(best, gap)
        return best

    def as_descriptions(self) -> List[dict]:
        descs = [
            {
                "name": "floor",
                "type": self.floor_kind.value,
                "center": list(self.floor.position),
                "radius": self.floor.radius,
                "level": self.floor.level,
                "material": self.materials[0].name if self.materials else None,
            }
        ]
        for i, shape in enumerate(self.shapes, start=1):
            material = self.material_for(i)
            descs.append(
                {
                    "name": shape.name,
                    "type": shape.kind.value,
                    "center": list(shape.record.position),
                    "radius": shape.record.radius,
                    "level": shape.record.level,
                    "material": material.name if material is not None else None,
                }
            )
        return descs

    def material_descriptions(self) -> List[dict]:
        return [
            {
                "name": m.name,
                "kind": m.kind.value,
                "color": list(m.color),
                "roughness": m.roughness,
                "texture": m.texture,
            }
            for m in self.materials
        ]
