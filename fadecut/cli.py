"""Thin CLI entry point — loads Settings and calls the engine."""

import argparse
import logging
import sys
from pathlib import Path

from fadecut.engine import process
from fadecut.errors import PipelineError
from fadecut.settings import load_settings

logger = logging.getLogger("fadecut")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="fadecut",
        description="fadecut — trim, fade, speed up and re-score a video with one ffmpeg call.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    proc = sub.add_parser("process", help="Process a video described by a settings file")
    proc.add_argument("--config", "-c", type=Path, required=True, help="Path to a TOML settings file")
    proc.add_argument("--dry-run", action="store_true", help="Print the ffmpeg command without running it")

    serve = sub.add_parser("serve", help="Launch the JSON job API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    serve.add_argument("--ffmpeg", type=str, default="ffmpeg", help="ffmpeg executable for web jobs")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from fadecut.web import create_app
        app = create_app(ffmpeg_path=args.ffmpeg)
        print(f"fadecut job API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        settings = load_settings(args.config)
    except (OSError, PipelineError) as e:
        logger.error("Failed to read config file: %s", e)
        sys.exit(1)

    try:
        result = process(settings, dry_run=args.dry_run)
    except PipelineError as e:
        logger.error("Oops! Something went wrong: %s", e)
        sys.exit(1)

    if args.dry_run:
        print(result.command)
        return

    print()
    print(f"Done! Output: {result.output_path}")
    print(f"  Source duration: {result.probe.duration:.1f}s at {result.probe.fps:g} fps")
    print(f"  Clip: {result.timing.clip_start:.1f}s -> {result.timing.clip_end:.1f}s")
    print(f"  Audio: {result.plan.topology.value}")
