from __future__ import annotations

import argparse
import logging

from testgen3d.factory import create_default_registry
from testgen3d.fixtures import SECTIONS, FixtureConfig, FixtureGenerator
from testgen3d.rng import DEFAULT_SEED

log = logging.getLogger(__name__)


def _size(text: str) -> tuple[int, int]:
    try:
        w, h = text.lower().split("x")
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate procedural renderer test fixtures.")
    parser.add_argument("--output", type=str, default="output", help="Output directory for generated fixtures")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for every random stream")
    parser.add_argument("--texture-size", type=int, default=512, help="Side of the square test textures")
    parser.add_argument("--sky-size", type=_size, default=(1024, 512), help="Environment map size, WIDTHxHEIGHT")
    parser.add_argument("--strands", type=int, default=64 * 64 * 16, help="Strands per hair bundle")
    parser.add_argument("--shapes", type=int, default=32, help="Objects in the random layout, floor included")
    parser.add_argument("--only", choices=SECTIONS, action="append", help="Generate only these sections")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _setup_logging(verbose: bool) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    _setup_logging(args.verbose)
    config = FixtureConfig(
        seed=args.seed,
        texture_size=args.texture_size,
        sky_size=args.sky_size,
        shape_count=args.shapes,
        strand_count=args.strands,
        sections=tuple(args.only) if args.only else SECTIONS,
    )
    generator = FixtureGenerator(create_default_registry(), config=config)
    manifest = generator.generate_all(args.output)
    total = sum(len(v) for v in manifest.values())
    log.info("Generated %d fixtures in %s", total, args.output)


if __name__ == "__main__":
    main()
