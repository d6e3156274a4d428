"""macOS launchd integration (launchctl)."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import List

from power_schedule.artifacts import update_plist
from power_schedule.backends.base import NativeScheduler, install_file, registration_error
from power_schedule.errors import RegistrationError
from power_schedule.models import CommandResult, ScheduleRequest

logger = logging.getLogger(__name__)

ALREADY_LOADED = "already loaded"

# launchctl load/unload exit 0 for several failures and only report them here
_SOFT_FAILURES = (
    "load failed",
    "unload failed",
    "invalid property list",
    "could not find specified service",
)


class LaunchdScheduler(NativeScheduler):
    """Installs the plist into LaunchDaemons and loads it by path."""

    not_found_markers = (
        "could not find specified service",
        "no such process",
        "no such file or directory",
    )

    @property
    def installed_plist(self) -> Path:
        return self.profile.installed_artifacts[0]

    def apply_schedule(self, request: ScheduleRequest) -> None:
        update_plist(
            self.profile.config_artifact_path,
            request,
            script_path=self.profile.script_install_path,
            label=self.profile.task_identifier,
        )

    def _launchctl(self, verb: str) -> CommandResult:
        result = self.run(["launchctl", verb, "-w", str(self.installed_plist)])
        if result.ok and any(m in result.output.lower() for m in _SOFT_FAILURES):
            # Report the soft failure with a non-zero code so callers classify it
            result = replace(result, returncode=1)
        return result

    def register(self) -> None:
        label = self.profile.task_identifier
        install_file(
            Path(self.profile.config_artifact_path), self.installed_plist, root_owned=True
        )
        result = self._launchctl("load")
        if ALREADY_LOADED in result.output.lower():
            # launchd keeps the old definition; load exits 0 regardless
            raise RegistrationError(
                f"Daemon '{label}' is already loaded with its previous schedule. "
                "Run reinstall to replace it.",
                command=result.args,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        if not result.ok:
            raise registration_error(f"Loading daemon '{label}'", result)
        logger.info("Daemon '%s' loaded", label)

    def unregister(self) -> List[str]:
        warnings: List[str] = []
        label = self.profile.task_identifier
        description = f"Unloading daemon '{label}'"

        if not self.installed_plist.exists():
            message = f"{description}: {self.installed_plist} not present, nothing to unload"
            logger.warning(message)
            return [message]

        result = self._launchctl("unload")
        if result.ok:
            return warnings
        if self.is_not_found(result):
            message = f"{description}: daemon was not loaded"
            logger.warning(message)
            warnings.append(message)
            return warnings
        raise registration_error(description, result)
