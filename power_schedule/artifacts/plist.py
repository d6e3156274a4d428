"""launchd property list editing.

The plist is edited as XML rather than via plistlib so that keys this tool
doesn't know about, comments and the DOCTYPE survive untouched.
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from power_schedule.artifacts.document import (
    XmlDocument,
    child_elements,
    load_document,
    save_document,
)
from power_schedule.errors import ArtifactStructureError
from power_schedule.models import ScheduleRequest

logger = logging.getLogger(__name__)

ACTION_MARKER = "-Action"

_EMPTY_ARRAY_LINE = re.compile(r"^[ \t]*\[\][ \t]*\r?\n", re.MULTILINE)


def strip_empty_array_artifacts(text: str) -> str:
    """Drop stray ``[]`` lines, which are not legal anywhere in a plist."""
    return _EMPTY_ARRAY_LINE.sub("", text)


def _top_dict(document: XmlDocument) -> ET.Element:
    children = child_elements(document.root)
    if document.root.tag != "plist" or not children or children[0].tag != "dict":
        raise ArtifactStructureError(document.path, "plist/dict")
    return children[0]


def dict_value(document: XmlDocument, container: ET.Element, key: str) -> ET.Element:
    """Return the value element paired with ``<key>key</key>`` in a plist dict."""
    children = child_elements(container)
    for index, child in enumerate(children):
        if child.tag == "key" and (child.text or "").strip() == key:
            if index + 1 >= len(children) or children[index + 1].tag == "key":
                break
            return children[index + 1]
    raise ArtifactStructureError(document.path, key)

def _set_action(
    document: XmlDocument, program_arguments: ET.Element, value: str, script_path=None
) -> None:
    if program_arguments.tag != "array":
        raise ArtifactStructureError(document.path, "ProgramArguments")

    entries = child_elements(program_arguments)
    for index, entry in enumerate(entries):
        if entry.tag == "string" and (entry.text or "").strip() == ACTION_MARKER:
            if index + 1 < len(entries) and entries[index + 1].tag == "string":
                document.set_text(entries[index + 1], value)
                if script_path is not None:
                    _set_script(document, entries, index, str(script_path))
                return
            break
    raise ArtifactStructureError(
        document.path,
        ACTION_MARKER,
        f"No value follows '{ACTION_MARKER}' in ProgramArguments of {document.path}",
    )


def _set_script(document: XmlDocument, entries, marker_index: int, script_path: str) -> None:
    # ProgramArguments is <interpreter> <script> -Action <value>
    if marker_index < 1 or entries[marker_index - 1].tag != "string":
        raise ArtifactStructureError(
            document.path,
            "ProgramArguments",
            f"No script path before '{ACTION_MARKER}' in ProgramArguments of {document.path}",
        )
    document.set_text(entries[marker_index - 1], script_path)


def _set_integer(document: XmlDocument, calendar: ET.Element, key: str, value: int) -> None:
    element = dict_value(document, calendar, key)
    if element.tag != "integer":
        raise ArtifactStructureError(
            document.path, key, f"'{key}' in {document.path} is not an integer"
        )
    document.set_text(element, str(value))


def apply_plist_schedule(
    document: XmlDocument,
    request: ScheduleRequest,
    script_path=None,
    label: Optional[str] = None,
) -> None:
    """Patch ProgramArguments and StartCalendarInterval of a parsed plist.

    ``script_path`` and ``label`` are written too when given, so the daemon
    matches the installed script and the component it was installed as.
    """
    top = _top_dict(document)
    program_arguments = dict_value(document, top, "ProgramArguments")
    calendar = dict_value(document, top, "StartCalendarInterval")
    if calendar.tag != "dict":
        raise ArtifactStructureError(document.path, "StartCalendarInterval")

    if label is not None:
        label_element = dict_value(document, top, "Label")
        if label_element.tag != "string":
            raise ArtifactStructureError(document.path, "Label")
        document.set_text(label_element, label)

    _set_action(document, program_arguments, request.schedule_type.value, script_path)
    _set_integer(document, calendar, "Hour", request.time.hour)
    _set_integer(document, calendar, "Minute", request.time.minute)
    logger.info(
        "Daemon definition: -Action %s at %s", request.schedule_type.value, request.time
    )


def update_plist(
    path: Path, request: ScheduleRequest, script_path=None, label: Optional[str] = None
) -> None:
    """Load, patch and rewrite a launchd plist in place."""
    document = load_document(path)
    apply_plist_schedule(document, request, script_path, label)
    save_document(document, postprocess=strip_empty_array_artifacts)
