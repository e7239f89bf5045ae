from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from flappy.app_config import load_game_config
from flappy.paths import default_settings_path


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="flappy", description="Flappy app runner (IRUN monorepo)")
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Run briefly and exit (for quick verification).",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Play one scripted round without a window and print the outcome.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to JSON settings (death boundary, score rate, debug). Defaults to $FLAPPY_SETTINGS or apps/flappy/settings.json.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Draw the death zone lines (overrides settings).",
    )
    parser.add_argument(
        "--flap-every",
        type=float,
        default=None,
        help="Headless only: flap on a fixed cadence in seconds (default: never flap).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug diagnostics.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.headless:
        from flappy.headless import run_headless

        cfg = load_game_config(args.settings or default_settings_path())
        if args.debug is not None:
            cfg = replace(cfg, debug_enabled=True)
        result = run_headless(config=cfg, flap_every=args.flap_every)
        print(f"phase: {result.phase.name}")
        print(f"score: {result.score}")
        print(f"frames: {result.frames} ({result.play_time:.2f}s played)")
        print(f"final y: {result.final_y:.2f}")
        return

    # Imported lazily so `--headless` works without a Panda3D display.
    from flappy.game import run

    run(smoke=args.smoke, settings_path=args.settings, debug=args.debug)


if __name__ == "__main__":
    main()
