"""Linux systemd timer integration (systemctl)."""

import logging
from typing import List

from power_schedule.artifacts import update_units
from power_schedule.backends.base import NativeScheduler, install_file
from power_schedule.models import ScheduleRequest

logger = logging.getLogger(__name__)


class SystemdTimerScheduler(NativeScheduler):
    """Installs the service/timer pair and enables + starts the timer."""

    not_found_markers = (
        "not loaded",
        "not found",
        "does not exist",
    )

    def apply_schedule(self, request: ScheduleRequest) -> None:
        update_units(
            self.profile.service_template,
            self.profile.timer_template,
            request,
            interpreter=self.profile.interpreter,
            script_path=self.profile.script_install_path,
        )

    def daemon_reload(self) -> None:
        self.run_checked(["systemctl", "daemon-reload"], "Reloading systemd units")

    def register(self) -> None:
        service_path, timer_path = self.profile.installed_artifacts
        install_file(self.profile.service_template, service_path)
        install_file(self.profile.timer_template, timer_path)

        timer = self.profile.timer_unit
        self.daemon_reload()
        self.run_checked(["systemctl", "enable", timer], f"Enabling {timer}")
        self.run_checked(["systemctl", "start", timer], f"Starting {timer}")
        logger.info("Timer %s enabled and started", timer)

    def unregister(self) -> List[str]:
        warnings: List[str] = []
        timer = self.profile.timer_unit
        self.run_tolerant(["systemctl", "stop", timer], f"Stopping {timer}", warnings)
        self.run_tolerant(
            ["systemctl", "disable", timer], f"Disabling {timer}", warnings
        )
        return warnings

    def remove_artifacts(self) -> List[str]:
        super().remove_artifacts()
        result = self.run(["systemctl", "daemon-reload"])
        if result.ok:
            return []
        detail = result.output or f"exit code {result.returncode}"
        message = f"systemctl daemon-reload failed after removing units: {detail}"
        logger.warning(message)
        return [message]
