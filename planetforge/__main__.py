"""CLI entry point for PlanetForge."""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import synthesize
from .dice import Circumstance, Difficulty, check, roll_check
from .errors import PlanetForgeError
from .gradient import PRESETS, parse_stop
from .logger import setup_logger
from .synth import OFFSET_MODES, GenerationParameters

logger = logging.getLogger(__name__)


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="planetforge",
        description="Generate procedural planet textures from fractal noise"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log debug output"
    )
    parser.add_argument(
        "--log-dir", default=None,
        help="Also write a timestamped log file to this directory"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    tex = sub.add_parser("texture", help="Generate a texture PNG")
    tex.add_argument(
        "--config", default=None,
        help="JSON file with generation parameters (flags override it)"
    )
    tex.add_argument(
        "--width", "-W", type=int, default=None,
        help="Texture width in pixels (default: 1024)"
    )
    tex.add_argument(
        "--height", "-H", type=int, default=None,
        help="Texture height in pixels (default: 512)"
    )
    tex.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed; 0 picks a fresh one (default: 0)"
    )
    tex.add_argument(
        "--scale", type=float, default=None, dest="noise_scale",
        help="Noise zoom, larger = broader features (default: 15)"
    )
    tex.add_argument(
        "--octaves", type=int, default=None,
        help="Number of noise layers (default: 5)"
    )
    tex.add_argument(
        "--persistence", type=float, default=None,
        help="Amplitude decay per octave 0.0-1.0 (default: 0.5)"
    )
    tex.add_argument(
        "--lacunarity", type=float, default=None,
        help="Frequency growth per octave (default: 2.0)"
    )
    tex.add_argument(
        "--ramp", choices=sorted(PRESETS), default=None,
        help="Color ramp preset (default: planet)"
    )
    tex.add_argument(
        "--stop", action="append", default=None, metavar="POS:COLOR",
        help="Color stop such as 0.5:#d8c690; repeat to build a custom ramp"
    )
    tex.add_argument(
        "--fixed", action="store_true",
        help="Use hard color bands instead of blending between stops"
    )
    tex.add_argument(
        "--offset-mode", choices=OFFSET_MODES, default=None,
        help="How the seed shifts the noise window (default: diagonal)"
    )
    tex.add_argument(
        "--workers", "-j", type=int, default=1,
        help="Parallel workers, -1 for all CPUs (default: 1)"
    )
    tex.add_argument(
        "--progress", action="store_true",
        help="Show a progress bar"
    )
    tex.add_argument(
        "--output", "-o", default="planet.png",
        help="Output file path (default: planet.png)"
    )

    roll = sub.add_parser("roll", help="Make a 2d6 action roll")
    roll.add_argument(
        "--modifier", "-m", type=int, default=0,
        help="Modifier added to the dice (default: 0)"
    )
    roll.add_argument(
        "--difficulty", "-d", default=None,
        choices=[d.name.lower() for d in Difficulty],
        help="Difficulty tier; --modifier is then added on top"
    )
    roll.add_argument(
        "--circumstance", "-c", default="neutral",
        choices=[c.name.lower() for c in Circumstance],
        help="Advantage (+1) or disadvantage (-1)"
    )
    return parser


def _texture_params(args):
    """Merge the config file and command-line flags into parameters."""
    config = {}
    if args.config:
        with open(args.config) as f:
            config = json.load(f)

    for name in ("width", "height", "seed", "noise_scale", "octaves",
                 "persistence", "lacunarity", "offset_mode"):
        value = getattr(args, name)
        if value is not None:
            config[name] = value

    if args.stop:
        config["color_ramp"] = [parse_stop(s) for s in args.stop]
    elif args.ramp:
        config["color_ramp"] = args.ramp
    if args.fixed:
        config["ramp_mode"] = "fixed"

    return GenerationParameters.from_dict(config)


def _run_texture(args):
    params = _texture_params(args)
    logger.debug(f"Parameters: {params}")
    result = synthesize(params, workers=args.workers, progress=args.progress)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    image = result.to_image()
    image.save(str(output))
    print(f"Saved texture ({image.size[0]}x{image.size[1]}, "
          f"seed {result.seed}) to {output}")


def _run_roll(args):
    if args.difficulty is not None:
        result = check(args.difficulty, args.modifier, args.circumstance)
    else:
        modifier = args.modifier + int(Circumstance[args.circumstance.upper()])
        result = roll_check(modifier)

    verdict = "success" if result.succeeded else "failure"
    print(f"{result.die1} + {result.die2} + ({result.modifier}) = "
          f"{result.total} vs 8: {verdict}, effect {result.effect:+d} "
          f"({result.outcome.name.replace('_', ' ').lower()})")


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logger(logging.DEBUG if args.verbose else logging.WARNING,
                 log_dir=args.log_dir)

    try:
        if args.command == "texture":
            _run_texture(args)
        else:
            _run_roll(args)
    except PlanetForgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
