"""
testgen3d: procedural fixtures for exercising a renderer.

The package exposes a sphere packer, a strand bundle generator, procedural
test textures, an analytic sky sampler, and a fixture generator that writes
all of them to disk.
"""

from .rng import DEFAULT_SEED, random_stream
from .geometry import LineShape, PointShape, ShapeKind
from .packing import (
    PackingDomain,
    PackingInfeasibleError,
    PlacementRecord,
    discretization_level,
    pack,
)
from .strands import StrandDescriptor, StrandParams, generate_points, generate_strands
from .textures import (
    hsv_to_rgb,
    make_checker,
    make_colored,
    make_gammaramp,
    make_gammarampf,
    make_grid,
    make_rchecker,
    make_rcolored,
)
from .sky import SkyModelState, acquire_sky_states, sample_sky
from .registry import TextureRegistry
from .fixtures import FixtureConfig, FixtureGenerator

__all__ = [
    "DEFAULT_SEED",
    "random_stream",
    "LineShape",
    "PointShape",
    "ShapeKind",
    "PackingDomain",
    "PackingInfeasibleError",
    "PlacementRecord",
    "discretization_level",
    "pack",
    "StrandDescriptor",
    "StrandParams",
    "generate_points",
    "generate_strands",
    "hsv_to_rgb",
    "make_checker",
    "make_colored",
    "make_gammaramp",
    "make_gammarampf",
    "make_grid",
    "make_rchecker",
    "make_rcolored",
    "SkyModelState",
    "acquire_sky_states",
    "sample_sky",
    "TextureRegistry",
    "FixtureConfig",
    "FixtureGenerator",
]
