"""Task controller: install / reinstall / uninstall transitions.

Registration state is never stored. Each transition just drives the native
scheduler and treats "already absent" as success, which makes every
transition safe to repeat.
"""

import logging
from enum import Enum
from typing import List

from power_schedule.backends import NativeScheduler
from power_schedule.errors import RegistrationError
from power_schedule.messaging import emit_warning
from power_schedule.models import ScheduleAction

logger = logging.getLogger(__name__)


class RegistrationState(str, Enum):
    NOT_REGISTERED = "not_registered"
    REGISTERED = "registered"


class TaskController:
    """Drives one NativeScheduler through the registration state machine."""

    def __init__(self, scheduler: NativeScheduler):
        self.scheduler = scheduler
        self.warnings: List[str] = []

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        emit_warning(message)

    def install(self) -> RegistrationState:
        """NotRegistered -> Registered. Raises RegistrationError on failure."""
        self.scheduler.register()
        return RegistrationState.REGISTERED

    def uninstall(self) -> RegistrationState:
        """Any -> NotRegistered. "Not found" failures are only warnings."""
        for message in self.scheduler.unregister():
            self._warn(message)
        return RegistrationState.NOT_REGISTERED

    def reinstall(self) -> RegistrationState:
        """Any -> Registered. Failure to remove the old registration isn't fatal."""
        try:
            self.uninstall()
        except RegistrationError as e:
            logger.warning("Ignoring unregistration failure during reinstall: %s", e)
            self._warn(f"Could not remove previous registration: {e}")
        return self.install()

    def transition(self, action: ScheduleAction) -> RegistrationState:
        if action is ScheduleAction.INSTALL:
            return self.install()
        if action is ScheduleAction.REINSTALL:
            return self.reinstall()
        return self.uninstall()
