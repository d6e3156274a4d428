"""Common interface for the native scheduler integrations."""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from power_schedule.commands import CommandRunner, run_command
from power_schedule.errors import ArtifactIOError, RegistrationError
from power_schedule.models import CommandResult, PlatformProfile, ScheduleRequest

logger = logging.getLogger(__name__)

ARTIFACT_MODE = 0o644


class NativeScheduler(ABC):
    """One OS scheduler: how to encode a schedule and how to (un)register it.

    ``unregister`` and ``remove_artifacts`` return warnings for failures
    that mean "already gone"; anything else raises RegistrationError.
    """

    #: Lower-cased fragments of command output meaning "nothing to remove"
    not_found_markers: Sequence[str] = ()

    def __init__(self, profile: PlatformProfile, runner: CommandRunner = run_command):
        self.profile = profile
        self.runner = runner

    @abstractmethod
    def apply_schedule(self, request: ScheduleRequest) -> None:
        """Edit the configuration artifact to encode ``request``."""

    @abstractmethod
    def register(self) -> None:
        """Hand the edited artifact to the OS scheduler and activate it."""

    @abstractmethod
    def unregister(self) -> List[str]:
        """Deactivate the registration."""

    def remove_artifacts(self) -> List[str]:
        """Delete files installed into the scheduler's own directories."""
        for path in self.profile.installed_artifacts:
            remove_file(path)
        return []

    # -- helpers -----------------------------------------------------------

    def run(self, args: Sequence[str]) -> CommandResult:
        return self.runner(list(args))

    def is_not_found(self, result: CommandResult) -> bool:
        output = result.output.lower()
        return any(marker in output for marker in self.not_found_markers)

    def run_checked(self, args: Sequence[str], description: str) -> CommandResult:
        """Run a registration step; any failure is fatal."""
        result = self.run(args)
        if not result.ok:
            raise registration_error(description, result)
        return result

    def run_tolerant(self, args: Sequence[str], description: str, warnings: List[str]) -> None:
        """Run an unregistration step; "not found" failures become warnings."""
        result = self.run(args)
        if result.ok:
            return
        if self.is_not_found(result):
            message = f"{description}: nothing to remove ({_first_line(result.output)})"
            logger.warning(message)
            warnings.append(message)
            return
        raise registration_error(description, result)


def _first_line(text: str) -> str:
    text = text.strip()
    return text.splitlines()[0] if text else "no output"


def registration_error(description: str, result: CommandResult) -> RegistrationError:
    detail = _first_line(result.output)
    if "access is denied" in result.output.lower() or "permission denied" in result.output.lower():
        message = f"{description} failed: access denied. Run as Administrator/root."
    else:
        message = f"{description} failed (exit code {result.returncode}): {detail}"
    return RegistrationError(
        message,
        command=result.args,
        returncode=result.returncode,
        stderr=result.stderr,
    )


def install_file(
    source: Path, destination: Path, mode: int = ARTIFACT_MODE, root_owned: bool = False
) -> None:
    """Copy an edited artifact into the scheduler's directory."""
    try:
        shutil.copyfile(source, destination)
        os.chmod(destination, mode)
        if root_owned:
            os.chown(destination, 0, 0)
    except OSError as e:
        raise ArtifactIOError(
            destination, f"Cannot install {source.name} to {destination}: {e}"
        ) from e
    logger.info("Installed %s", destination)


def remove_file(path: Path) -> bool:
    try:
        Path(path).unlink()
    except FileNotFoundError:
        logger.info("%s already absent", path)
        return False
    except OSError as e:
        raise ArtifactIOError(path, f"Cannot remove {path}: {e}") from e
    logger.info("Removed %s", path)
    return True
