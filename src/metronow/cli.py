"""Command-line entry point for the departure-board server."""

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import List, Optional

from .config import Settings
from .errors import ConfigError
from .server import run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metronow",
        description="Push real-time Prague departure boards to WebSocket clients.",
    )
    parser.add_argument("--host", help="Interface to bind (default: METRONOW_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to listen on (default: METRONOW_PORT or 3000)")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between refreshes (default: METRONOW_REFRESH_INTERVAL or 5)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.interval is not None:
        if args.interval <= 0:
            logger.error("--interval must be positive")
            return 1
        overrides["refresh_interval"] = args.interval
    settings = dataclasses.replace(settings, **overrides)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
