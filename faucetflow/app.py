"""
Application entry point: CLI parsing, dependency checks, run and save.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from . import __version__


def _check_deps() -> list:
    missing = []
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")
    try:
        import PyQt5  # noqa: F401
    except ImportError:
        missing.append("PyQt5")
    return missing


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="faucetflow",
        description="Faucet Flow: generative stream-and-force images.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  %(prog)s                              # classic 1000 px image, seed 0\n"
            "  %(prog)s --preset preview --seed 7    # quick 300 px preview\n"
            "  %(prog)s --config my.json -o out.png  # parameters from a JSON file\n"
            "  %(prog)s --workers 8                  # integrate streams on 8 processes\n"
            "  %(prog)s --list-presets               # show available presets\n"
            "  %(prog)s -v                           # verbose logging\n"
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--preset", type=str, default="classic", help="Parameter preset (default classic)")
    p.add_argument("--config", type=str, default=None, help="JSON parameter file, applied over the preset")
    p.add_argument("--seed", type=int, default=None, help="Random seed")
    p.add_argument("--size", type=int, default=None, help="Canvas size in pixels")
    p.add_argument("--streams", type=int, default=None, help="Number of streams")
    p.add_argument("--forces", type=int, default=None, help="Number of forces")
    p.add_argument("--faucets", type=int, default=None, help="Number of faucets")
    p.add_argument("--workers", type=int, default=1, help="Worker processes (default 1)")
    p.add_argument("-o", "--output", type=str, default=None,
                   help="Output image (default img-<n>-<size>.png in the current directory)")
    p.add_argument("--save-grid", type=str, default=None, help="Also save the raw grid as .npy")
    p.add_argument("--save-config", type=str, default=None, help="Write the final parameters as JSON")
    p.add_argument("--list-presets", action="store_true", help="List presets and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def _default_output(size: int, directory: str = ".") -> str:
    num_entries = len(os.listdir(directory))
    return os.path.join(directory, f"img-{num_entries}-{size}.png")


def _fail(message: str) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return 1


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI with *argv*; returns the process exit code."""
    args = _parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("faucetflow")

    # List presets
    if args.list_presets:
        from .presets import PRESETS, list_presets
        print("Available presets:")
        for key in list_presets():
            s = PRESETS[key]
            print(f"  {key:10s}  {s.name:14s}  {s.description}")
        return 0

    # Dependency check
    missing = _check_deps()
    if missing:
        return _fail(f"Missing packages: {', '.join(missing)}\n"
                     f"Install: pip install {' '.join(missing)}")

    if args.workers < 1:
        return _fail("--workers must be at least 1.")

    from .errors import ConfigurationError
    from .params import load_params, save_params
    from .presets import PRESETS, get_preset, list_presets

    if args.preset not in PRESETS:
        avail = ", ".join(list_presets())
        return _fail(f"Unknown preset '{args.preset}'. Available: {avail}")
    preset = get_preset(args.preset)

    overrides = {
        name: value for name, value in (
            ("seed", args.seed),
            ("size", args.size),
            ("num_streams", args.streams),
            ("num_forces", args.forces),
            ("num_faucets", args.faucets),
        ) if value is not None
    }
    try:
        if args.config:
            params = load_params(args.config, **preset.overrides).replace(**overrides)
        else:
            params = preset.params(**overrides)
    except ConfigurationError as exc:
        return _fail(f"Invalid parameters: {exc}")
    except (OSError, json.JSONDecodeError) as exc:
        return _fail(f"Cannot read {args.config}: {exc}")

    # Launch
    logger.info("Starting Faucet Flow v%s (preset %s)", __version__, args.preset)
    logger.info("Parameters:\n%s", json.dumps(params.to_dict(), indent=2))
    if args.save_config:
        try:
            save_params(params, args.save_config)
        except OSError as exc:
            return _fail(f"Cannot write {args.save_config}: {exc}")

    import numpy as np
    from .renderer import render_grid
    from .simulation import FlowSimulation

    simulation = FlowSimulation(params)
    grid = simulation.run(workers=args.workers)

    if args.save_grid:
        np.save(args.save_grid, grid)
        logger.info("Saved raw grid to %s", args.save_grid)

    output = args.output or _default_output(params.size)
    try:
        render_grid(grid, params.color_cap, output)
    except OSError as exc:
        return _fail(str(exc))
    print(output)
    return 0


def main() -> None:
    sys.exit(run())
