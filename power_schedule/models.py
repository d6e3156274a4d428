"""Core data types shared by every stage of a run."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class ScheduleAction(str, Enum):
    """Top-level action requested on the command line."""

    INSTALL = "install"
    REINSTALL = "reinstall"
    UNINSTALL = "uninstall"


class ScheduleType(str, Enum):
    """What the trigger script does when the schedule fires."""

    SHUTDOWN = "shutdown"
    RESTART = "restart"


class PlatformFamily(str, Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


@dataclass(frozen=True)
class ScheduleTime:
    """Time of day, validated to 0-23 / 0-59."""

    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class ScheduleRequest:
    """A validated request.

    ``schedule_type`` and ``time`` are always set for install/reinstall and
    always ``None`` for uninstall.
    """

    action: ScheduleAction
    schedule_type: Optional[ScheduleType] = None
    time: Optional[ScheduleTime] = None

    @property
    def needs_schedule(self) -> bool:
        return self.action is not ScheduleAction.UNINSTALL


@dataclass(frozen=True)
class PlatformProfile:
    """Everything resolved about the host for this run.

    Built once by the path resolver and never mutated afterwards.
    """

    family: PlatformFamily
    component_name: str
    script_source: Path
    script_install_path: Path
    config_artifact_path: Path
    task_identifier: str
    service_unit: Optional[str] = None
    timer_unit: Optional[str] = None
    installed_artifacts: Tuple[Path, ...] = ()
    interpreter: Optional[str] = None

    @property
    def service_template(self) -> Path:
        return self.config_artifact_path / "linux.service"

    @property
    def timer_template(self) -> Path:
        return self.config_artifact_path / "linux.timer"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(s for s in (self.stderr.strip(), self.stdout.strip()) if s)
