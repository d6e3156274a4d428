"""Native scheduler integrations.

One ``NativeScheduler`` implementation per platform family:
    - windows: Task Scheduler via schtasks
    - macos: launchd via launchctl
    - linux: systemd timers via systemctl
"""

from typing import Dict, Type

from power_schedule.backends.base import NativeScheduler
from power_schedule.backends.linux import SystemdTimerScheduler
from power_schedule.backends.macos import LaunchdScheduler
from power_schedule.backends.windows import WindowsTaskScheduler
from power_schedule.commands import CommandRunner, run_command
from power_schedule.models import PlatformFamily, PlatformProfile

SCHEDULERS: Dict[PlatformFamily, Type[NativeScheduler]] = {
    PlatformFamily.WINDOWS: WindowsTaskScheduler,
    PlatformFamily.MACOS: LaunchdScheduler,
    PlatformFamily.LINUX: SystemdTimerScheduler,
}


def get_scheduler(
    profile: PlatformProfile, runner: CommandRunner = run_command
) -> NativeScheduler:
    """Return the scheduler integration for ``profile.family``."""
    return SCHEDULERS[profile.family](profile, runner)


__all__ = [
    "NativeScheduler",
    "WindowsTaskScheduler",
    "LaunchdScheduler",
    "SystemdTimerScheduler",
    "SCHEDULERS",
    "get_scheduler",
]
