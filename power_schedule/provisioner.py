"""Trigger script provisioning.

Copies the trigger script to its install location and locks it down so the
scheduler can run it but unprivileged users can't modify it.
"""

import logging
import os
import shutil
from pathlib import Path

from power_schedule.commands import CommandRunner, run_command
from power_schedule.errors import ProvisioningError
from power_schedule.models import PlatformFamily, PlatformProfile

logger = logging.getLogger(__name__)

SCRIPT_MODE = 0o755
ROOT_UID = 0
ROOT_GID = 0  # root on Linux, wheel on macOS

# Well-known SIDs so icacls works regardless of the system language:
# LocalSystem, BUILTIN\Administrators, BUILTIN\Users
WINDOWS_GRANTS = ("*S-1-5-18:F", "*S-1-5-32-544:F", "*S-1-5-32-545:RX")


def _copy(source: Path, destination: Path) -> None:
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise ProvisioningError(
            destination, f"Failed to copy trigger script to {destination}: {e}"
        ) from e


def _secure_windows(path: Path, runner: CommandRunner) -> None:
    args = ["icacls", str(path), "/inheritance:r"]
    for grant in WINDOWS_GRANTS:
        args.extend(["/grant:r", grant])
    result = runner(args)
    if not result.ok:
        raise ProvisioningError(
            path,
            f"Failed to set permissions on {path} (exit code {result.returncode}): "
            f"{result.output}",
        )


def _secure_posix(path: Path) -> None:
    try:
        os.chown(path, ROOT_UID, ROOT_GID)
        os.chmod(path, SCRIPT_MODE)
    except OSError as e:
        raise ProvisioningError(
            path, f"Failed to set owner/permissions on {path}: {e}"
        ) from e


def provision_script(profile: PlatformProfile, runner: CommandRunner = run_command) -> Path:
    """Install the trigger script for ``profile``; returns the installed path.

    Raises:
        ProvisioningError: source missing, destination unusable, or the
            permission step failed.
    """
    source = Path(profile.script_source)
    destination = Path(profile.script_install_path)

    if not source.is_file():
        raise ProvisioningError(source, f"Trigger script not found: {source}")

    if profile.family is PlatformFamily.WINDOWS:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisioningError(
                destination, f"Cannot create {destination.parent}: {e}"
            ) from e
        _copy(source, destination)
        _secure_windows(destination, runner)
    else:
        if not destination.parent.is_dir():
            raise ProvisioningError(
                destination, f"Install directory does not exist: {destination.parent}"
            )
        _copy(source, destination)
        _secure_posix(destination)

    logger.info("Provisioned trigger script at %s", destination)
    return destination


def remove_script(profile: PlatformProfile) -> bool:
    """Delete the installed trigger script. Returns False if it wasn't there."""
    destination = Path(profile.script_install_path)
    try:
        destination.unlink()
    except FileNotFoundError:
        logger.info("Trigger script %s already absent", destination)
        return False
    except OSError as e:
        raise ProvisioningError(
            destination, f"Failed to remove trigger script {destination}: {e}"
        ) from e

    if profile.family is PlatformFamily.WINDOWS:
        # The install directory is ours; leave it only if something else is in it
        try:
            destination.parent.rmdir()
        except OSError:
            logger.debug("Leaving non-empty directory %s", destination.parent)
    return True
