from __future__ import annotations

from .registry import TextureRegistry
from .textures import (
    make_checker,
    make_colored,
    make_gammaramp,
    make_gammarampf,
    make_grid,
    make_rchecker,
    make_rcolored,
)


def create_default_registry() -> TextureRegistry:
    registry = TextureRegistry()
    registry.register("grid", make_grid)
    registry.register("checker", make_checker)
    registry.register("rchecker", make_rchecker)
    registry.register("colored", make_colored)
    registry.register("rcolored", make_rcolored)
    registry.register("gamma", make_gammaramp)
    registry.register("gammaf", make_gammarampf, hdr=True)
    return registry
