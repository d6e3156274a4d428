"""Path resolution for install targets and native scheduler identifiers.

Given the platform family and the configured component name, computes where
the trigger script goes, which configuration artifact gets edited and what
the task / daemon / units are called. The result is an immutable
``PlatformProfile`` used read-only for the rest of the run.
"""

import logging
import os
import re
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

from power_schedule.errors import InvalidComponentName
from power_schedule.models import PlatformFamily, PlatformProfile
from power_schedule.settings import PACKAGE_DIR, Settings

logger = logging.getLogger(__name__)

COMPONENT_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")

TRIGGER_SCRIPT_SOURCE = PACKAGE_DIR / "trigger.py"

WINDOWS_TEMPLATE = "windows.xml"
MACOS_TEMPLATE = "macos.plist"
SERVICE_SUFFIX = ".service"
TIMER_SUFFIX = ".timer"

POSIX_INSTALL_DIR = Path("/usr/local/bin")

# Checked in order before falling back to a PATH search
WELL_KNOWN_INTERPRETERS = (
    "/usr/bin/python3",
    "/usr/local/bin/python3",
    "/bin/python3",
)


def validate_component_name(name: str) -> str:
    if not name or not COMPONENT_NAME_PATTERN.match(name):
        raise InvalidComponentName(name)
    return name


def resolve_interpreter(
    override: Optional[str] = None,
    candidates: Sequence[str] = WELL_KNOWN_INTERPRETERS,
) -> str:
    """Locate the interpreter the scheduler will run the trigger script with."""
    if override:
        return override

    for candidate in candidates:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate

    found = shutil.which("python3") or shutil.which("python")
    if found:
        return found

    logger.warning("No system python3 found, using %s", sys.executable)
    return sys.executable


def resolve_profile(family: PlatformFamily, settings: Settings) -> PlatformProfile:
    """Compute every install target and identifier for ``family``.

    Raises:
        InvalidComponentName: the configured component name can't be used.
    """
    name = validate_component_name(settings.component_name)
    script_name = f"{name}.py"
    template_dir = Path(settings.template_dir)

    if family is PlatformFamily.WINDOWS:
        install_dir = settings.install_dir or Path(settings.program_data_dir) / name
        profile = PlatformProfile(
            family=family,
            component_name=name,
            script_source=TRIGGER_SCRIPT_SOURCE,
            script_install_path=Path(install_dir) / script_name,
            config_artifact_path=template_dir / WINDOWS_TEMPLATE,
            task_identifier=name,
        )
    elif family is PlatformFamily.MACOS:
        install_dir = settings.install_dir or POSIX_INSTALL_DIR
        profile = PlatformProfile(
            family=family,
            component_name=name,
            script_source=TRIGGER_SCRIPT_SOURCE,
            script_install_path=Path(install_dir) / script_name,
            config_artifact_path=template_dir / MACOS_TEMPLATE,
            task_identifier=name,
            installed_artifacts=(Path(settings.launch_daemons_dir) / f"{name}.plist",),
        )
    elif family is PlatformFamily.LINUX:
        install_dir = settings.install_dir or POSIX_INSTALL_DIR
        service_unit = name + SERVICE_SUFFIX
        timer_unit = name + TIMER_SUFFIX
        unit_dir = Path(settings.systemd_unit_dir)
        profile = PlatformProfile(
            family=family,
            component_name=name,
            script_source=TRIGGER_SCRIPT_SOURCE,
            script_install_path=Path(install_dir) / script_name,
            config_artifact_path=template_dir,
            task_identifier=name,
            service_unit=service_unit,
            timer_unit=timer_unit,
            installed_artifacts=(unit_dir / service_unit, unit_dir / timer_unit),
            interpreter=resolve_interpreter(settings.interpreter),
        )
    else:
        raise ValueError(f"Unknown platform family: {family!r}")

    logger.debug("Resolved platform profile: %s", profile)
    return profile
