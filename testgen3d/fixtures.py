from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Tuple

from .geometry import ShapeKind
from .io import ensure_dir, write_hdr, write_meta, write_ply, write_png
from .materials import random_materials
from .packing import assign_shape_kinds, ground_layout, rigid_layout
from .registry import TextureRegistry
from .rng import DEFAULT_SEED, random_stream
from .scene import Layout
from .sky import sample_sky
from .strands import PRESETS, generate_points, generate_strands

log = logging.getLogger(__name__)

SECTIONS = ("textures", "environments", "layouts", "curves")

GROUND_KINDS = (ShapeKind.UVSPHERECUBE, ShapeKind.UVSPHERIZEDCUBE, ShapeKind.UVFLIPCAPSPHERE)
RIGID_KINDS = (ShapeKind.UVSPHERECUBE, ShapeKind.UVCUBE)


@dataclass
class FixtureConfig:
    seed: int = DEFAULT_SEED
    texture_size: int = 512
    sky_size: Tuple[int, int] = (1024, 512)
    sun_zenith: float = 0.8
    turbidity: float = 8.0
    ground_albedo: float = 0.2
    sky_scale: float = 1.0 / 2**6
    restrict_to_hemisphere: bool = True
    shape_count: int = 32
    shape_level: int = 5
    rigid_count: int = 128
    rigid_level: int = 1
    strand_count: int = 64 * 64 * 16
    point_count: int = 64 * 64 * 16
    sections: Tuple[str, ...] = field(default_factory=lambda: SECTIONS)


class FixtureGenerator:
    def __init__(self, registry: TextureRegistry, config: FixtureConfig | None = None) -> None:
        self.registry = registry
        self.config = config or FixtureConfig()
        unknown = set(self.config.sections) - set(SECTIONS)
        if unknown:
            raise ValueError(f"Unknown fixture sections: {sorted(unknown)}")

    def _stream(self):
        return random_stream(self.config.seed)

    def generate_textures(self, output_root: Path) -> List[Dict]:
        size = self.config.texture_size
        entries = []
        for entry in self.registry.entries():
            pixels = entry.synthesize(size)
            path = Path(output_root) / entry.filename
            if entry.hdr:
                write_hdr(path, pixels)
            else:
                write_png(path, pixels)
            entries.append({"name": entry.name, "path": entry.filename, "size": size, "hdr": entry.hdr})
        return entries

    def generate_environments(self, output_root: Path) -> List[Dict]:
        cfg = self.config
        width, height = cfg.sky_size
        pixels = sample_sky(
            width,
            height,
            cfg.sun_zenith,
            cfg.turbidity,
            cfg.ground_albedo,
            cfg.sky_scale,
            cfg.restrict_to_hemisphere,
        )
        write_hdr(Path(output_root) / "env.hdr", pixels)
        return [
            {
                "name": "env",
                "path": "env.hdr",
                "width": width,
                "height": height,
                "sun_zenith": cfg.sun_zenith,
                "sun_elevation_deg": round(90.0 - math.degrees(cfg.sun_zenith), 4),
                "turbidity": cfg.turbidity,
                "ground_albedo": cfg.ground_albedo,
                "scale": cfg.sky_scale,
            }
        ]

    def build_layouts(self) -> Dict[str, Layout]:
        cfg = self.config
        textures = self.registry.names()

        rng = self._stream()
        records = ground_layout(cfg.shape_count, rng=rng, base_level=cfg.shape_level)
        ground = Layout(
            floor=records[0],
            floor_kind=ShapeKind.UVFLOOR,
            shapes=assign_shape_kinds(records, GROUND_KINDS, rng=rng),
            materials=random_materials(cfg.shape_count, textures, rng=self._stream()),
        )

        rng = self._stream()
        records = rigid_layout(cfg.rigid_count, rng=rng, base_level=cfg.rigid_level)
        rigid = Layout(
            floor=records[0],
            floor_kind=ShapeKind.UVCUBE,
            shapes=assign_shape_kinds(records, RIGID_KINDS, rng=rng),
            materials=random_materials(cfg.rigid_count, textures, rng=self._stream()),
        )
        return {"random": ground, "rigid": rigid}

    def generate_layouts(self, output_root: Path) -> List[Dict]:
        entries = []
        for name, layout in self.build_layouts().items():
            fname = f"{name}_layout.json"
            write_meta(
                Path(output_root) / fname,
                {"objects": layout.as_descriptions(), "materials": layout.material_descriptions()},
            )
            log.info("layout %s: %d objects, min clearance %.4f", name, len(layout.shapes), layout.min_clearance())
            entries.append({"name": name, "path": fname, "objects": len(layout.shapes) + 1})
        return entries

    def generate_curves(self, output_root: Path) -> List[Dict]:
        cfg = self.config
        entries = []
        points = generate_points(cfg.point_count, scale=(0.5, 0.5, 0.5), rng=self._stream())
        write_ply(Path(output_root) / "points01.ply", points)
        entries.append({"name": "points01", "path": "points01.ply", "vertices": points.num_vertices})
        for k, (preset, params) in enumerate(PRESETS.items(), start=1):
            params = replace(params, count=cfg.strand_count)
            shape = generate_strands(params, rng=self._stream())
            fname = f"lines{k:02d}.ply"
            write_ply(Path(output_root) / fname, shape)
            entries.append(
                {
                    "name": f"lines{k:02d}",
                    "preset": preset,
                    "path": fname,
                    "vertices": shape.num_vertices,
                    "segments": int(len(shape.lines)),
                }
            )
        return entries

    def generate_all(self, output_root: str | Path) -> Dict[str, List[Dict]]:
        output_root = Path(output_root)
        ensure_dir(output_root)
        steps = {
            "textures": self.generate_textures,
            "environments": self.generate_environments,
            "layouts": self.generate_layouts,
            "curves": self.generate_curves,
        }
        manifest: Dict[str, List[Dict]] = {}
        for section in self.config.sections:
            log.info("generating %s ...", section)
            manifest[section] = steps[section](output_root)
        write_meta(output_root / "meta.json", {"seed": self.config.seed, **manifest})
        return manifest
