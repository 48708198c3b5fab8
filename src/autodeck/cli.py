"""
Command-line entrypoint: run the Auto DJ headless and log every transition.

By default time is simulated, so a long mix runs in a fraction of a
second; --realtime drives the engine from the wall clock instead.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import Config, ConfigError
from .engine.mixer import AutoDJEngine
from .engine.runner import RealtimeRunner, wall_clock_ms
from .library import LibraryError, find_track, load_library
from .mixing.styles import MixStyle, UnknownMixStyleError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodeck",
        description="Run the Auto DJ mixing automation without a UI.",
    )
    parser.add_argument("--config", help="Path to autodeck.toml")
    parser.add_argument("--style", choices=MixStyle.names(), help="Mix style (overrides config)")
    parser.add_argument(
        "--seconds",
        type=float,
        default=60.0,
        help="How long to run the mix, in seconds (default: 60)",
    )
    parser.add_argument("--library", help="JSON track list to load decks from")
    parser.add_argument("--deck-a", help="Track id to load on deck A")
    parser.add_argument("--deck-b", help="Track id to load on deck B")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Drive the engine from the wall clock instead of simulated time",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _load_decks(engine: AutoDJEngine, args: argparse.Namespace) -> None:
    if not args.library:
        if args.deck_a or args.deck_b:
            raise LibraryError("--deck-a/--deck-b require --library")
        return

    tracks = load_library(args.library)
    for side, track_id in (("A", args.deck_a), ("B", args.deck_b)):
        if not track_id:
            continue
        track = find_track(tracks, track_id)
        if track is None:
            raise LibraryError(f"Track {track_id} not found in {args.library}")
        engine.load_track_to_deck(track, side)


def run(args: argparse.Namespace) -> AutoDJEngine:
    """Build, run and stop an engine according to parsed arguments."""
    if args.seconds <= 0:
        raise ValueError(f"--seconds must be positive, got {args.seconds}")

    config = Config.load(args.config)
    start_ms = wall_clock_ms() if args.realtime else 0.0
    engine = AutoDJEngine(config, mix_style=args.style, start_ms=start_ms)
    _load_decks(engine, args)

    if args.realtime:
        RealtimeRunner(engine).run_for(args.seconds)
    else:
        engine.start()
        try:
            remaining = args.seconds * 1000.0
            while remaining > 0:
                step = min(engine.fast_tick_ms, remaining)
                engine.tick(step)
                remaining -= step
        finally:
            engine.stop()

    snapshot = engine.snapshot()
    logger.info(
        f"✅ Mix finished at {snapshot.phase.value}: crossfader "
        f"{snapshot.crossfader['value']:.1f}, status: {snapshot.status}"
    )
    return engine


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )

    try:
        logger.info("🎵 Starting Auto DJ...")
        run(args)
        return 0

    except KeyboardInterrupt:
        logger.warning("Mix interrupted by user")
        return 130
    except (ConfigError, LibraryError, UnknownMixStyleError, ValueError) as e:
        logger.error(f"Auto DJ failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
