#!/usr/bin/env python3
"""Shut down or restart this machine now.

Installed by power-schedule and run by the system scheduler as:

    <interpreter> <this script> -Action shutdown|restart

Runs under the system interpreter outside any virtualenv, so it only uses
the standard library.
"""

import argparse
import logging
import subprocess
import sys

logger = logging.getLogger("power_schedule.trigger")

COMMANDS = {
    "win32": {
        "shutdown": ["shutdown", "/s", "/t", "0"],
        "restart": ["shutdown", "/r", "/t", "0"],
    },
    "posix": {
        "shutdown": ["shutdown", "-h", "now"],
        "restart": ["shutdown", "-r", "now"],
    },
}


def build_command(action: str, platform: str = sys.platform):
    table = COMMANDS["win32"] if platform == "win32" else COMMANDS["posix"]
    return table[action.lower()]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "-Action",
        dest="action",
        required=True,
        type=str.lower,
        choices=("shutdown", "restart"),
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    command = build_command(args.action)
    logger.info("Running: %s", " ".join(command))
    try:
        return subprocess.call(command)
    except FileNotFoundError:
        logger.error("%s: command not found", command[0])
        return 127


if __name__ == "__main__":
    sys.exit(main())
