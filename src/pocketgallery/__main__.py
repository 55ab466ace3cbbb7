"""PocketGallery entry point.

Changes:
  - 2026-10-16: Invalid root exits with status 1 instead of 0.
  - 2026-10-14: Added --ffmpeg and --max-thumbnails flags.
  - 2026-10-12: Initial CLI: one positional root directory, Rich logging.
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from pocketgallery import __version__
from pocketgallery.config import DEFAULT_PORT, RootValidationError, Settings, validate_root
from pocketgallery.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pocketgallery",
        description="Browse a directory tree as a media gallery over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pocketgallery ~/Videos                 Serve ~/Videos on port 19992
  pocketgallery /mnt/media --port 8080   Serve on another port
  pocketgallery . --host 127.0.0.1       Only reachable from this machine
""",
    )
    parser.add_argument("root", help="Directory to serve")
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help=f"Port to bind (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--ffmpeg", type=str, default=None, help="Path to the ffmpeg binary"
    )
    parser.add_argument(
        "--max-thumbnails",
        type=int,
        default=None,
        help="Max ffmpeg thumbnail processes at once (default: 4)",
    )
    parser.add_argument(
        "--log-level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR"
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        root = validate_root(args.root)
    except RootValidationError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        settings = Settings.load(
            root_dir=root,
            host=args.host,
            port=args.port,
            ffmpeg_path=args.ffmpeg,
            thumbnail_max_concurrency=args.max_thumbnails,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    setup_logging(level=settings.log_level)

    from pocketgallery.api.serve import run_server

    try:
        run_server(settings)
    except KeyboardInterrupt:
        logger.info("PocketGallery stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
