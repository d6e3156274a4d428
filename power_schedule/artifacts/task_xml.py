"""Windows Task Scheduler task definition editing."""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from power_schedule.artifacts.document import (
    XmlDocument,
    iter_local,
    load_document,
    save_document,
)
from power_schedule.errors import ArtifactStructureError
from power_schedule.models import ScheduleRequest, ScheduleTime, ScheduleType

logger = logging.getLogger(__name__)

# Only the time of day matters to a daily CalendarTrigger.
PLACEHOLDER_DATE = date(2024, 1, 1)

ACTION_TOKEN = re.compile(r"-Action\s+\S+", re.IGNORECASE)
SCRIPT_TOKEN = re.compile(r'(?:"[^"]*"|\S+)(?=\s+-Action\b)', re.IGNORECASE)


def start_boundary(time: ScheduleTime) -> str:
    stamp = datetime(
        PLACEHOLDER_DATE.year,
        PLACEHOLDER_DATE.month,
        PLACEHOLDER_DATE.day,
        time.hour,
        time.minute,
    )
    return stamp.isoformat()


def replace_action_argument(arguments: str, schedule_type: ScheduleType) -> str:
    """Set the ``-Action`` token in an argument string, keeping every other token."""
    token = f"-Action {schedule_type.value}"
    updated, count = ACTION_TOKEN.subn(token, arguments)
    if count == 0:
        updated = f"{arguments.rstrip()} {token}".strip()
    return updated


def replace_script_argument(arguments: str, script_path: str) -> Optional[str]:
    """Point the token before ``-Action`` at ``script_path``; None if there is none."""
    quoted = f'"{script_path}"'
    updated, count = SCRIPT_TOKEN.subn(lambda match: quoted, arguments, count=1)
    return updated if count else None


def _single(document: XmlDocument, name: str):
    matches = list(iter_local(document.root, name))
    if not matches:
        raise ArtifactStructureError(document.path, name)
    if len(matches) > 1:
        raise ArtifactStructureError(
            document.path,
            name,
            f"Expected one '{name}' in {document.path}, found {len(matches)}",
        )
    return matches[0]


def _exec_arguments(document: XmlDocument):
    for exec_action in iter_local(document.root, "Exec"):
        for arguments in iter_local(exec_action, "Arguments"):
            return arguments
    raise ArtifactStructureError(document.path, "Exec/Arguments")


def apply_task_schedule(
    document: XmlDocument, request: ScheduleRequest, script_path=None
) -> None:
    """Patch StartBoundary and the ``-Action`` argument of a parsed task.

    With ``script_path`` the argument in front of ``-Action`` is rewritten
    too, so the task runs the script where it was actually installed.
    """
    boundary = _single(document, "StartBoundary")
    arguments = _exec_arguments(document)

    text = replace_action_argument(arguments.text or "", request.schedule_type)
    if script_path is not None:
        text = replace_script_argument(text, str(script_path))
        if text is None:
            raise ArtifactStructureError(
                document.path,
                "Exec/Arguments",
                f"No script path before '-Action' in Arguments of {document.path}",
            )

    document.set_text(boundary, start_boundary(request.time))
    document.set_text(arguments, text)
    logger.info("Task definition: StartBoundary=%s Arguments=%s", boundary.text, text)


def update_task_xml(path: Path, request: ScheduleRequest, script_path=None) -> None:
    """Load, patch and rewrite a Task Scheduler XML definition in place."""
    document = load_document(path)
    apply_task_schedule(document, request, script_path)
    save_document(document)
