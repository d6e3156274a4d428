"""systemd unit file editing.

Unit files are line-oriented, so the two lines that carry the schedule are
rewritten whole and every other line passes through byte for byte.
"""

import logging
from pathlib import Path
from typing import Callable, List

from power_schedule.errors import ArtifactIOError, ArtifactStructureError
from power_schedule.models import ScheduleRequest, ScheduleTime, ScheduleType

logger = logging.getLogger(__name__)

EXEC_START = "ExecStart="
ON_CALENDAR = "OnCalendar="


def _quote(arg: str) -> str:
    if any(ch.isspace() for ch in arg) or '"' in arg:
        return '"' + arg.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return arg


def exec_start_line(interpreter: str, script_path, schedule_type: ScheduleType) -> str:
    command = " ".join(
        _quote(str(part))
        for part in (interpreter, script_path, "-Action", schedule_type.value)
    )
    return EXEC_START + command


def on_calendar_line(time: ScheduleTime) -> str:
    return f"{ON_CALENDAR}*-*-* {time.hour:02d}:{time.minute:02d}:00"


def _line_ending(line: str) -> str:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith("\n"):
        return "\n"
    return ""


def replace_directive(lines: List[str], directive: str, replacement: str) -> int:
    """Swap every ``directive`` line for ``replacement``; returns how many."""
    count = 0
    for index, line in enumerate(lines):
        if line.lstrip().startswith(directive):
            lines[index] = replacement + _line_ending(line)
            count += 1
    return count


def _read_lines(path: Path) -> List[str]:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ArtifactIOError(path, f"Cannot read unit file {path}: {e}") from e


def _write_lines(path: Path, lines: List[str]) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.writelines(lines)
    except OSError as e:
        raise ArtifactIOError(path, f"Cannot write unit file {path}: {e}") from e


def _rewrite(path: Path, directive: str, build: Callable[[], str]) -> str:
    lines = _read_lines(path)
    replacement = build()
    if replace_directive(lines, directive, replacement) == 0:
        raise ArtifactStructureError(path, directive.rstrip("="))
    _write_lines(path, lines)
    logger.info("%s: %s", path, replacement)
    return replacement


def update_service_unit(
    path: Path, request: ScheduleRequest, interpreter: str, script_path
) -> str:
    return _rewrite(
        Path(path),
        EXEC_START,
        lambda: exec_start_line(interpreter, script_path, request.schedule_type),
    )


def update_timer_unit(path: Path, request: ScheduleRequest) -> str:
    return _rewrite(Path(path), ON_CALENDAR, lambda: on_calendar_line(request.time))


def update_units(
    service_path: Path,
    timer_path: Path,
    request: ScheduleRequest,
    interpreter: str,
    script_path,
) -> None:
    """Rewrite ExecStart in the service and OnCalendar in the timer."""
    update_service_unit(service_path, request, interpreter, script_path)
    update_timer_unit(timer_path, request)
