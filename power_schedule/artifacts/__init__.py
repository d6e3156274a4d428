"""Configuration artifact editing.

Each native scheduler reads a different descriptor format:
    - task_xml: Windows Task Scheduler XML task definition
    - plist: macOS launchd property list
    - units: Linux systemd service + timer unit pair

All of them are loaded, patched and written back in place so that
content this tool doesn't model is preserved.
"""

from power_schedule.artifacts.plist import update_plist
from power_schedule.artifacts.task_xml import update_task_xml
from power_schedule.artifacts.units import update_units

__all__ = ["update_plist", "update_task_xml", "update_units"]
