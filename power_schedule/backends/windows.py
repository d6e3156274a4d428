"""Windows Task Scheduler integration (schtasks)."""

import logging
from typing import List

from power_schedule.artifacts import update_task_xml
from power_schedule.backends.base import NativeScheduler
from power_schedule.models import ScheduleRequest

logger = logging.getLogger(__name__)


class WindowsTaskScheduler(NativeScheduler):
    """Registers the task definition XML under ``task_identifier``."""

    not_found_markers = (
        "cannot find the file specified",
        "does not exist",
    )

    def apply_schedule(self, request: ScheduleRequest) -> None:
        update_task_xml(
            self.profile.config_artifact_path,
            request,
            script_path=self.profile.script_install_path,
        )

    def register(self) -> None:
        name = self.profile.task_identifier
        self.run_checked(
            [
                "schtasks",
                "/Create",
                "/TN",
                name,
                "/XML",
                str(self.profile.config_artifact_path),
                "/F",
            ],
            f"Creating scheduled task '{name}'",
        )
        logger.info("Scheduled task '%s' created", name)

    def unregister(self) -> List[str]:
        warnings: List[str] = []
        name = self.profile.task_identifier
        self.run_tolerant(
            ["schtasks", "/Delete", "/TN", name, "/F"],
            f"Deleting scheduled task '{name}'",
            warnings,
        )
        return warnings
