"""Host platform detection.

Everything downstream branches on the family returned here.
"""

import sys
from typing import Optional

from power_schedule.errors import UnsupportedPlatform
from power_schedule.models import PlatformFamily


def detect_platform(system: Optional[str] = None) -> PlatformFamily:
    """Return the OS family of this host (or of ``system``, a sys.platform value)."""
    system = sys.platform if system is None else system

    if system == "win32":
        return PlatformFamily.WINDOWS
    if system == "darwin":
        return PlatformFamily.MACOS
    if system.startswith("linux"):
        return PlatformFamily.LINUX
    raise UnsupportedPlatform(system)
