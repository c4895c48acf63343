"""Non-overlapping placement of randomly sized spheres by rejection sampling.

Object 0 of every packing is a fixed floor record that never takes part in
collision tests. Every later object draws a candidate radius and position
(position first when the radius depends on it), and is accepted only if it clears all previously accepted objects:

    distance(p_i, p_j) >= r_i + r_j

Rejected candidates are thrown away and redrawn. Each object gets a bounded
number of attempts; running out raises PackingInfeasibleError instead of
spinning forever on a domain that is too small.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import ShapeKind
from .rng import random_stream, uniform

log = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10000
REFERENCE_RADIUS = 0.5


class PackingInfeasibleError(RuntimeError):
    def __init__(self, index: int, attempts: int) -> None:
        super().__init__(f"could not place object {index} after {attempts} attempts")
        self.index = index
        self.attempts = attempts


@dataclass(frozen=True)
class PlacementRecord:
    position: Tuple[float, float, float]
    radius: float
    level: int


@dataclass(frozen=True)
class PlacedShape:
    name: str
    kind: ShapeKind
    record: PlacementRecord


DEFAULT_FLOOR = PlacementRecord(position=(0.0, 0.0, -4.0), radius=6.0, level=6)
RIGID_FLOOR = PlacementRecord(position=(0.0, -0.5, 0.0), radius=6.0, level=2)

SizeDistribution = Callable[[np.random.Generator, Optional[np.ndarray]], float]


@dataclass(frozen=True)
class UniformSize:
    """radius = base + spread * u, drawn before the candidate position."""

    uses_position = False

    base: float
    spread: float

    def __call__(self, rng: np.random.Generator, position: np.ndarray | None) -> float:
        return self.base + self.spread * uniform(rng)


@dataclass(frozen=True)
class DepthFalloffSize:
    """Objects grow towards the camera: base + ((near - z) / depth)^2 * gain. No draw."""

    uses_position = True

    base: float
    gain: float
    near: float
    depth: float

    def __call__(self, rng: np.random.Generator, position: np.ndarray) -> float:
        t = (self.near - position[2]) / self.depth
        return self.base + t * t * self.gain


@dataclass(frozen=True)
class PackingDomain:
    """Axis-aligned region candidate centers are drawn from.

    Ranges are (start, end) pairs and may be inverted: z_range=(1, -2) draws
    z = 1 - 3u. Without a y_range, y is the radius when rest_on_ground is set
    (the object sits on the ground plane) and 0 otherwise.
    """

    x_range: Tuple[float, float]
    z_range: Tuple[float, float]
    y_range: Tuple[float, float] | None = None
    rest_on_ground: bool = True

    def __post_init__(self) -> None:
        ranges = [("x_range", self.x_range), ("z_range", self.z_range)]
        if self.y_range is not None:
            ranges.append(("y_range", self.y_range))
        for name, (lo, hi) in ranges:
            if not (math.isfinite(lo) and math.isfinite(hi)) or lo == hi:
                raise ValueError(f"{name} must span a non-empty interval, got {(lo, hi)}")

    def sample(self, rng: np.random.Generator) -> np.ndarray:
        x0, x1 = self.x_range
        z0, z1 = self.z_range
        x = x0 + (x1 - x0) * uniform(rng)
        if self.y_range is None:
            z = z0 + (z1 - z0) * uniform(rng)
            return np.array([x, 0.0, z])
        y0, y1 = self.y_range
        y = y0 + (y1 - y0) * uniform(rng)
        z = z0 + (z1 - z0) * uniform(rng)
        return np.array([x, y, z])


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def discretization_level(radius: float, base_level: int, reference_radius: float = REFERENCE_RADIUS) -> int:
    """Subdivision level keeping silhouette detail roughly size invariant."""
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    return _round_half_away(math.log2(2.0**base_level * radius / reference_radius))


def _clears(candidate: np.ndarray, radius: float, centers: List[np.ndarray], radii: List[float]) -> bool:
    for center, other in zip(centers, radii):
        if float(np.linalg.norm(candidate - center)) < radius + other:
            return False
    return True


def pack(
    count: int,
    size: SizeDistribution,
    domain: PackingDomain,
    rng: np.random.Generator | None = None,
    floor: PlacementRecord = DEFAULT_FLOOR,
    base_level: int = 5,
    reference_radius: float = REFERENCE_RADIUS,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> List[PlacementRecord]:
    """Place `count` records (floor included) in acceptance order."""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if reference_radius <= 0:
        raise ValueError(f"reference_radius must be positive, got {reference_radius}")
    rng = rng if rng is not None else random_stream()

    records: List[PlacementRecord] = [floor]
    centers: List[np.ndarray] = []
    radii: List[float] = []
    for index in range(1, count):
        for attempt in range(1, max_attempts + 1):
            if getattr(size, "uses_position", True):
                candidate = domain.sample(rng)
                radius = float(size(rng, candidate))
            else:
                radius = float(size(rng, None))
                candidate = domain.sample(rng)
            if radius <= 0:
                raise ValueError(f"size distribution produced non-positive radius {radius}")
            if domain.y_range is None and domain.rest_on_ground:
                candidate[1] = radius
            if _clears(candidate, radius, centers, radii):
                break
        else:
            raise PackingInfeasibleError(index, max_attempts)
        if attempt > 1:
            log.debug("object %d placed after %d attempts", index, attempt)
        centers.append(candidate)
        radii.append(radius)
        level = discretization_level(radius, base_level, reference_radius)
        records.append(PlacementRecord(position=tuple(float(c) for c in candidate), radius=radius, level=level))
    return records


def ground_layout(count: int, rng: np.random.Generator | None = None, base_level: int = 5) -> List[PlacementRecord]:
    """Spheres resting on the floor, larger towards the viewer."""
    domain = PackingDomain(x_range=(-2.0, 2.0), z_range=(1.0, -2.0))
    size = DepthFalloffSize(base=0.15, gain=0.5, near=1.0, depth=3.0)
    return pack(count, size, domain, rng=rng, floor=DEFAULT_FLOOR, base_level=base_level)


def rigid_layout(count: int, rng: np.random.Generator | None = None, base_level: int = 1) -> List[PlacementRecord]:
    """Objects floating above a floor slab, for rigid body drops."""
    domain = PackingDomain(x_range=(-2.0, 2.0), z_range=(-2.0, 2.0), y_range=(1.0, 5.0))
    size = UniformSize(base=0.1, spread=0.4)
    return pack(count, size, domain, rng=rng, floor=RIGID_FLOOR, base_level=base_level)


def assign_shape_kinds(
    records: Sequence[PlacementRecord],
    kinds: Sequence[ShapeKind],
    rng: np.random.Generator | None = None,
) -> List[PlacedShape]:
    """Pick a tessellation kind for every non-floor record.

    Flip-cap spheres carry an extra level of detail.
    """
    if not kinds:
        raise ValueError("kinds must not be empty")
    rng = rng if rng is not None else random_stream()
    shapes: List[PlacedShape] = []
    for i, record in enumerate(records[1:], start=1):
        kind = kinds[min(int(uniform(rng) * len(kinds)), len(kinds) - 1)]
        if kind == ShapeKind.UVFLIPCAPSPHERE:
            record = PlacementRecord(record.position, record.radius, record.level + 1)
        shapes.append(PlacedShape(name=f"obj{i:02d}", kind=kind, record=record))
    return shapes
