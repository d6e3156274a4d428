"""Command-line entry point for power-schedule."""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from power_schedule import __version__
from power_schedule.errors import InvalidInput
from power_schedule.messaging import emit_error
from power_schedule.orchestrator import EXIT_FAILURE, run
from power_schedule.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ArgumentParser(argparse.ArgumentParser):
    """Reports bad flags as InvalidInput instead of exiting with status 2."""

    def error(self, message: str):
        raise InvalidInput("arguments", f"{message} (see --help)")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="power-schedule",
        description=(
            "Install or remove a daily scheduled shutdown/restart using the "
            "native scheduler (Task Scheduler, launchd or systemd timers)."
        ),
        add_help=False,
    )
    parser.add_argument(
        "--action",
        "-a",
        type=str,
        help="install, reinstall or uninstall (prompted if omitted)",
    )
    parser.add_argument(
        "--schedule-type",
        "-s",
        dest="schedule_type",
        type=str,
        help="shutdown or restart (prompted if omitted; ignored for uninstall)",
    )
    parser.add_argument(
        "--time",
        "-t",
        type=str,
        help="Time of day as HH:mm, 24-hour (prompted if omitted; ignored for uninstall)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without changing anything",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"{__version__}",
        help="Show version and exit",
    )
    parser.add_argument(
        "--help",
        "-h",
        action="store_true",
        dest="show_help",
        help="Show this help and exit",
    )
    return parser


def configure_logging(settings: Settings) -> None:
    """Configure the root logger once from settings."""
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    if not root.handlers:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(stream)

    if settings.log_file:
        try:
            handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        except OSError as e:
            logging.getLogger(__name__).warning(
                "Cannot open log file %s: %s", settings.log_file, e
            )
        else:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except InvalidInput as e:
        emit_error(str(e))
        return EXIT_FAILURE

    if args.show_help:
        return run(show_help=True, usage=parser.format_help())

    try:
        settings = get_settings()
    except ValidationError as e:
        emit_error(f"Invalid configuration: {e.errors()[0]['msg']}")
        return EXIT_FAILURE
    configure_logging(settings)

    return run(
        action=args.action,
        schedule_type=args.schedule_type,
        time=args.time,
        show_help=args.show_help,
        usage=parser.format_help(),
        dry_run=args.dry_run,
        settings=settings,
    )


def main_entry():
    """Entry point for the installed CLI tool."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        emit_error("Cancelled")
        sys.exit(EXIT_FAILURE)
