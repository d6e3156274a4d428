"""Blocking execution of native scheduler commands.

Each command runs to completion with no timeout and its exit status is
returned for the caller to classify. Nothing here decides whether a
failure is fatal.
"""

import logging
import subprocess
from typing import Callable, Sequence

from power_schedule.models import CommandResult

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127

CommandRunner = Callable[[Sequence[str]], CommandResult]


def run_command(args: Sequence[str]) -> CommandResult:
    """Run ``args`` (no shell) and capture its output."""
    args = [str(a) for a in args]
    logger.debug("Running: %s", " ".join(args))

    try:
        process = subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            shell=False,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("Command not found: %s", args[0])
        return CommandResult(
            args=args,
            returncode=COMMAND_NOT_FOUND,
            stderr=f"{args[0]}: command not found",
        )

    result = CommandResult(
        args=args,
        returncode=process.returncode,
        stdout=process.stdout or "",
        stderr=process.stderr or "",
    )
    logger.debug("Exit code %s from %s", result.returncode, args[0])
    if not result.ok and result.output:
        logger.debug("Output: %s", result.output)
    return result
