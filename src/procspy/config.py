"""Command-line configuration and logging setup for procspy."""

import argparse
import logging
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field

from textual.logging import TextualHandler

from procspy.enumerator import MAX_RECORDS
from procspy.monitor import DEFAULT_INTERVAL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(slots=True)
class Config:
    """Runtime settings."""

    watch_path: str = field(default_factory=tempfile.gettempdir)
    interval: float = DEFAULT_INTERVAL
    max_records: int = MAX_RECORDS
    log_file: str | None = None
    log_level: str = "WARNING"


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procspy",
        description="Live terminal view of running processes.",
    )
    parser.add_argument(
        "--watch",
        dest="watch_path",
        metavar="PATH",
        default=tempfile.gettempdir(),
        help="directory whose read/write activity triggers a refresh (default: %(default)s)",
    )
    parser.add_argument(
        "--interval",
        type=_positive_float,
        default=DEFAULT_INTERVAL,
        metavar="SECONDS",
        help="seconds between timed refreshes (default: %(default)s)",
    )
    parser.add_argument(
        "--max-records",
        type=_positive_int,
        default=MAX_RECORDS,
        metavar="N",
        help="maximum number of processes per snapshot (default: %(default)s)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="write log messages to this file",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        type=str.upper,
        help="logging threshold (default: %(default)s)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Config:
    """Parse command-line arguments into a Config."""
    args = build_parser().parse_args(argv)
    return Config(
        watch_path=args.watch_path,
        interval=args.interval,
        max_records=args.max_records,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(config: Config) -> logging.Handler:
    """
    Route log records away from the terminal.

    Writing to stderr would tear the full-screen frame, so records go to
    ``config.log_file`` when set, otherwise to the Textual devtools console.
    """
    if config.log_file:
        handler: logging.Handler = logging.FileHandler(config.log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = TextualHandler()

    root = logging.getLogger("procspy")
    root.setLevel(config.log_level)
    root.addHandler(handler)
    return handler
