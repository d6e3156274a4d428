"""Parameter validation.

Turns raw command-line values into a ``ScheduleRequest``. Values that were
not supplied are prompted for interactively; anything that doesn't
validate raises ``InvalidInput`` naming the offending field.
"""

import logging
import re
from typing import Optional, Type, TypeVar

from power_schedule.errors import InvalidInput
from power_schedule.models import (
    ScheduleAction,
    ScheduleRequest,
    ScheduleTime,
    ScheduleType,
)
from power_schedule.prompts import ask_choice, ask_text

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

E = TypeVar("E", ScheduleAction, ScheduleType)

_ACTION_DESCRIPTIONS = {
    ScheduleAction.INSTALL: "Register the scheduled task",
    ScheduleAction.REINSTALL: "Remove any existing registration, then install",
    ScheduleAction.UNINSTALL: "Remove the scheduled task and installed files",
}

_TYPE_DESCRIPTIONS = {
    ScheduleType.SHUTDOWN: "Power the machine off",
    ScheduleType.RESTART: "Reboot the machine",
}


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_choice(value: str, enum_cls: Type[E], field: str) -> E:
    """Case-insensitively match ``value`` against the members of ``enum_cls``."""
    normalized = str(value).strip().lower()
    for member in enum_cls:
        if member.value == normalized:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise InvalidInput(field, f"Invalid {field} '{value}'. Expected one of: {allowed}")


def parse_time(value: str) -> ScheduleTime:
    """Parse a literal ``HH:mm`` time of day."""
    match = TIME_PATTERN.match(str(value).strip())
    if not match:
        raise InvalidInput("time", f"Invalid time '{value}'. Expected HH:mm (e.g. 22:00)")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise InvalidInput(
            "time", f"Invalid time '{value}'. Hours must be 00-23 and minutes 00-59"
        )
    return ScheduleTime(hour=hour, minute=minute)


def _prompt_choice(title: str, enum_cls: Type[E], field: str, descriptions: dict) -> str:
    choices = [m.value for m in enum_cls]
    selected = ask_choice(title, choices, [descriptions[m] for m in enum_cls])
    if selected is None:
        raise InvalidInput(field, f"No {field} selected")
    return selected


def _prompt_time() -> str:
    entered = ask_text("Time of day (HH:mm)")
    if entered is None:
        raise InvalidInput("time", "No time entered")
    return entered


def validate_request(
    action: Optional[str] = None,
    schedule_type: Optional[str] = None,
    time: Optional[str] = None,
    show_help: bool = False,
) -> Optional[ScheduleRequest]:
    """Build a validated ScheduleRequest from raw inputs.

    Args:
        action: install / reinstall / uninstall, any case. Prompted if blank.
        schedule_type: shutdown / restart, any case. Ignored for uninstall.
        time: literal HH:mm. Ignored for uninstall.
        show_help: when set nothing is validated and None is returned, so the
            caller can print usage and exit successfully.

    Raises:
        InvalidInput: a value is malformed or a prompt was cancelled.
    """
    if show_help:
        return None

    if _blank(action):
        action = _prompt_choice(
            "Select action", ScheduleAction, "action", _ACTION_DESCRIPTIONS
        )
    parsed_action = parse_choice(action, ScheduleAction, "action")

    if parsed_action is ScheduleAction.UNINSTALL:
        if not _blank(schedule_type) or not _blank(time):
            logger.debug("Ignoring schedule type/time for uninstall")
        return ScheduleRequest(action=parsed_action)

    if _blank(schedule_type):
        schedule_type = _prompt_choice(
            "Select schedule type", ScheduleType, "scheduleType", _TYPE_DESCRIPTIONS
        )
    parsed_type = parse_choice(schedule_type, ScheduleType, "scheduleType")

    if _blank(time):
        time = _prompt_time()
    parsed_time = parse_time(time)

    return ScheduleRequest(
        action=parsed_action, schedule_type=parsed_type, time=parsed_time
    )
