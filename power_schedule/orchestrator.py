"""Top-level sequencing of a power-schedule run.

install / reinstall:
    validate -> detect platform -> resolve paths -> edit configuration
    artifact -> provision trigger script -> register
uninstall:
    validate -> detect platform -> resolve paths -> unregister ->
    remove trigger script and installed artifacts

The first failure aborts the run. There is no rollback; running
reinstall (or uninstall) again is the way to recover.
"""

import logging
from typing import Optional

from power_schedule.backends import NativeScheduler, get_scheduler
from power_schedule.commands import CommandRunner, run_command
from power_schedule.controller import TaskController
from power_schedule.errors import PowerScheduleError
from power_schedule.messaging import emit_error, emit_info, emit_success, emit_warning
from power_schedule.models import PlatformProfile, ScheduleAction, ScheduleRequest
from power_schedule.paths import resolve_profile
from power_schedule.platform import detect_platform
from power_schedule.provisioner import provision_script, remove_script
from power_schedule.settings import Settings, get_settings
from power_schedule.validator import validate_request

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def handle_install(
    request: ScheduleRequest,
    profile: PlatformProfile,
    scheduler: NativeScheduler,
    runner: CommandRunner = run_command,
) -> None:
    """Install or reinstall; ``request.action`` picks the transition."""
    emit_info(f"Updating configuration artifact {profile.config_artifact_path}")
    scheduler.apply_schedule(request)

    emit_info(f"Installing trigger script to {profile.script_install_path}")
    provision_script(profile, runner)

    emit_info(f"Registering '{profile.task_identifier}' with the system scheduler")
    TaskController(scheduler).transition(request.action)

    emit_success(
        f"Scheduled daily {request.schedule_type.value} at {request.time} "
        f"({profile.family.value}: {profile.task_identifier})"
    )


def handle_uninstall(profile: PlatformProfile, scheduler: NativeScheduler) -> None:
    emit_info(f"Removing '{profile.task_identifier}' from the system scheduler")
    TaskController(scheduler).uninstall()

    if not remove_script(profile):
        emit_warning(f"Trigger script {profile.script_install_path} was not installed")
    for message in scheduler.remove_artifacts():
        emit_warning(message)

    emit_success(f"Uninstalled '{profile.task_identifier}'")


def describe_plan(request: ScheduleRequest, profile: PlatformProfile) -> None:
    """Print what a run would do without touching anything."""
    emit_info(f"Action:          {request.action.value}")
    if request.needs_schedule:
        emit_info(f"Schedule:        daily {request.schedule_type.value} at {request.time}")
    emit_info(f"Platform:        {profile.family.value}")
    emit_info(f"Identifier:      {profile.task_identifier}")
    emit_info(f"Trigger script:  {profile.script_install_path}")
    emit_info(f"Config artifact: {profile.config_artifact_path}")
    for path in profile.installed_artifacts:
        emit_info(f"Installs:        {path}")
    if profile.interpreter:
        emit_info(f"Interpreter:     {profile.interpreter}")


def run(
    action: Optional[str] = None,
    schedule_type: Optional[str] = None,
    time: Optional[str] = None,
    show_help: bool = False,
    usage: str = "",
    dry_run: bool = False,
    settings: Optional[Settings] = None,
    runner: CommandRunner = run_command,
    system: Optional[str] = None,
) -> int:
    """Execute one run and return the process exit code.

    Every failure ends up here as a single error line; details go to the log.
    """
    try:
        request = validate_request(action, schedule_type, time, show_help=show_help)
        if request is None:
            emit_info(usage)
            return EXIT_SUCCESS

        family = detect_platform(system)
        profile = resolve_profile(family, settings or get_settings())
        scheduler = get_scheduler(profile, runner)
        logger.info("Running %s on %s", request.action.value, family.value)

        if dry_run:
            describe_plan(request, profile)
            return EXIT_SUCCESS

        if request.action is ScheduleAction.UNINSTALL:
            handle_uninstall(profile, scheduler)
        else:
            handle_install(request, profile, scheduler, runner)
    except PowerScheduleError as e:
        logger.debug("Run failed", exc_info=True)
        emit_error(str(e))
        return EXIT_FAILURE
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        emit_error(f"Unexpected error: {e}")
        return EXIT_FAILURE

    return EXIT_SUCCESS
