"""Tests for the native scheduler integrations, driven through a fake runner."""

import plistlib

import pytest

from power_schedule.backends import (
    LaunchdScheduler,
    SystemdTimerScheduler,
    WindowsTaskScheduler,
    get_scheduler,
)
from power_schedule.errors import RegistrationError
from power_schedule.models import (
    PlatformFamily,
    ScheduleAction,
    ScheduleRequest,
    ScheduleTime,
    ScheduleType,
)
from power_schedule.paths import resolve_profile

RESTART_0830 = ScheduleRequest(
    action=ScheduleAction.INSTALL,
    schedule_type=ScheduleType.RESTART,
    time=ScheduleTime(8, 30),
)


@pytest.mark.parametrize(
    "family,cls",
    [
        (PlatformFamily.WINDOWS, WindowsTaskScheduler),
        (PlatformFamily.MACOS, LaunchdScheduler),
        (PlatformFamily.LINUX, SystemdTimerScheduler),
    ],
)
def test_get_scheduler(settings, runner, family, cls):
    scheduler = get_scheduler(resolve_profile(family, settings), runner)
    assert isinstance(scheduler, cls)
    assert scheduler.runner is runner


class TestSystemdTimerScheduler:
    @pytest.fixture
    def profile(self, settings):
        return resolve_profile(PlatformFamily.LINUX, settings)

    def test_apply_schedule_edits_templates(self, profile, runner):
        SystemdTimerScheduler(profile, runner).apply_schedule(RESTART_0830)

        assert "OnCalendar=*-*-* 08:30:00" in profile.timer_template.read_text()
        assert (
            "ExecStart=/usr/bin/python3 "
            f"{profile.script_install_path} -Action restart"
        ) in profile.service_template.read_text()

    def test_register_installs_units_then_reloads_enables_starts(self, profile, runner):
        SystemdTimerScheduler(profile, runner).register()

        service_path, timer_path = profile.installed_artifacts
        assert service_path.read_text() == profile.service_template.read_text()
        assert timer_path.read_text() == profile.timer_template.read_text()
        assert runner.calls == [
            ["systemctl", "daemon-reload"],
            ["systemctl", "enable", "power-schedule.timer"],
            ["systemctl", "start", "power-schedule.timer"],
        ]

    def test_register_failure_is_fatal(self, profile, make_runner):
        runner = make_runner({("systemctl", "enable"): (1, "Failed to enable unit")})
        with pytest.raises(RegistrationError) as exc_info:
            SystemdTimerScheduler(profile, runner).register()

        assert exc_info.value.returncode == 1
        assert exc_info.value.command == ["systemctl", "enable", "power-schedule.timer"]
        assert ["systemctl", "start", "power-schedule.timer"] not in runner.calls

    def test_permission_denied_hint(self, profile, make_runner):
        runner = make_runner(
            {("systemctl", "daemon-reload"): (1, "Failed to reload daemon: Permission denied")}
        )
        with pytest.raises(RegistrationError) as exc_info:
            SystemdTimerScheduler(profile, runner).register()
        assert "access denied" in str(exc_info.value)

    def test_unregister_stops_then_disables(self, profile, runner):
        warnings = SystemdTimerScheduler(profile, runner).unregister()

        assert warnings == []
        assert runner.calls == [
            ["systemctl", "stop", "power-schedule.timer"],
            ["systemctl", "disable", "power-schedule.timer"],
        ]

    def test_unregister_not_loaded_becomes_warnings(self, profile, make_runner):
        runner = make_runner(
            {
                ("systemctl", "stop"): (5, "Failed to stop power-schedule.timer: Unit power-schedule.timer not loaded."),
                ("systemctl", "disable"): (1, "Failed to disable unit: Unit file power-schedule.timer does not exist."),
            }
        )
        warnings = SystemdTimerScheduler(profile, runner).unregister()

        assert len(warnings) == 2
        assert "nothing to remove" in warnings[0]

    def test_unregister_other_failure_is_fatal(self, profile, make_runner):
        runner = make_runner({("systemctl", "stop"): (1, "Failed to connect to bus")})
        with pytest.raises(RegistrationError):
            SystemdTimerScheduler(profile, runner).unregister()

    def test_remove_artifacts_deletes_units_and_reloads(self, profile, runner):
        for path in profile.installed_artifacts:
            path.write_text("[Unit]\n")

        assert SystemdTimerScheduler(profile, runner).remove_artifacts() == []

        assert not any(path.exists() for path in profile.installed_artifacts)
        assert runner.calls == [["systemctl", "daemon-reload"]]

    def test_remove_artifacts_reload_failure_is_warning(self, profile, make_runner):
        runner = make_runner({("systemctl", "daemon-reload"): (1, "bus error")})
        warnings = SystemdTimerScheduler(profile, runner).remove_artifacts()
        assert len(warnings) == 1
        assert "bus error" in warnings[0]


class TestWindowsTaskScheduler:
    @pytest.fixture
    def profile(self, settings):
        return resolve_profile(PlatformFamily.WINDOWS, settings)

    def test_apply_schedule_embeds_installed_script(self, profile, runner):
        WindowsTaskScheduler(profile, runner).apply_schedule(RESTART_0830)

        xml = profile.config_artifact_path.read_bytes().decode("utf-16")
        assert f'"{profile.script_install_path}" -Action restart' in xml
        assert "<StartBoundary>2024-01-01T08:30:00</StartBoundary>" in xml

    def test_register_creates_task_from_xml(self, profile, runner):
        WindowsTaskScheduler(profile, runner).register()
        assert runner.calls == [
            [
                "schtasks",
                "/Create",
                "/TN",
                "power-schedule",
                "/XML",
                str(profile.config_artifact_path),
                "/F",
            ]
        ]

    def test_register_access_denied(self, profile, make_runner):
        runner = make_runner({("schtasks",): (1, "ERROR: Access is denied.")})
        with pytest.raises(RegistrationError) as exc_info:
            WindowsTaskScheduler(profile, runner).register()
        assert "Administrator" in str(exc_info.value)

    def test_unregister_deletes_task(self, profile, runner):
        assert WindowsTaskScheduler(profile, runner).unregister() == []
        assert runner.calls == [["schtasks", "/Delete", "/TN", "power-schedule", "/F"]]

    def test_unregister_missing_task_is_warning(self, profile, make_runner):
        runner = make_runner(
            {
                ("schtasks", "/Delete"): (
                    1,
                    "ERROR: The system cannot find the file specified.",
                )
            }
        )
        warnings = WindowsTaskScheduler(profile, runner).unregister()
        assert len(warnings) == 1
        assert "cannot find the file specified" in warnings[0]

    def test_remove_artifacts_has_nothing_to_do(self, profile, runner):
        assert WindowsTaskScheduler(profile, runner).remove_artifacts() == []
        assert runner.calls == []


class TestLaunchdScheduler:
    @pytest.fixture
    def profile(self, settings):
        return resolve_profile(PlatformFamily.MACOS, settings)

    def test_apply_schedule_follows_configured_name_and_install_dir(self, settings, tmp_path, runner):
        settings.component_name = "nightly"
        settings.install_dir = tmp_path / "tools"
        profile = resolve_profile(PlatformFamily.MACOS, settings)

        LaunchdScheduler(profile, runner).apply_schedule(RESTART_0830)

        data = plistlib.loads(profile.config_artifact_path.read_bytes())
        assert data["Label"] == "nightly"
        assert data["ProgramArguments"][1] == str(tmp_path / "tools" / "nightly.py")
        assert data["ProgramArguments"][2:] == ["-Action", "restart"]

    def test_already_loaded_daemon_is_not_reported_as_success(self, profile, make_runner, no_chown):
        runner = make_runner(
            {("launchctl", "load"): (0, "/Library/LaunchDaemons/power-schedule.plist: service already loaded")}
        )
        with pytest.raises(RegistrationError) as exc_info:
            LaunchdScheduler(profile, runner).register()
        assert "reinstall" in str(exc_info.value)

    def test_register_installs_plist_and_loads(self, profile, runner, no_chown):
        LaunchdScheduler(profile, runner).register()

        installed = profile.installed_artifacts[0]
        assert plistlib.loads(installed.read_bytes())["Label"] == "power-schedule"
        assert no_chown == [(installed, 0, 0)]
        assert runner.calls == [["launchctl", "load", "-w", str(installed)]]

    def test_soft_load_failure_is_fatal(self, profile, make_runner, no_chown):
        # launchctl load reports this on stderr but still exits 0
        runner = make_runner(
            {("launchctl", "load"): (0, "Load failed: 5: Input/output error")}
        )
        with pytest.raises(RegistrationError) as exc_info:
            LaunchdScheduler(profile, runner).register()
        assert exc_info.value.returncode == 1
        assert "Input/output error" in str(exc_info.value)

    def test_unregister_without_installed_plist_is_warning(self, profile, runner):
        warnings = LaunchdScheduler(profile, runner).unregister()
        assert len(warnings) == 1
        assert "nothing to unload" in warnings[0]
        assert runner.calls == []

    def test_unregister_unloads_installed_plist(self, profile, runner):
        installed = profile.installed_artifacts[0]
        installed.write_text("<plist/>")

        assert LaunchdScheduler(profile, runner).unregister() == []
        assert runner.calls == [["launchctl", "unload", "-w", str(installed)]]

    def test_unregister_not_loaded_is_warning(self, profile, make_runner):
        profile.installed_artifacts[0].write_text("<plist/>")
        runner = make_runner({("launchctl",): (3, "Could not find specified service")})

        warnings = LaunchdScheduler(profile, runner).unregister()
        assert warnings == ["Unloading daemon 'power-schedule': daemon was not loaded"]

    def test_unregister_other_failure_is_fatal(self, profile, make_runner):
        profile.installed_artifacts[0].write_text("<plist/>")
        runner = make_runner({("launchctl",): (1, "Operation not permitted while System Integrity Protection is engaged")})

        with pytest.raises(RegistrationError):
            LaunchdScheduler(profile, runner).unregister()

    def test_remove_artifacts_deletes_installed_plist(self, profile, runner):
        installed = profile.installed_artifacts[0]
        installed.write_text("<plist/>")

        assert LaunchdScheduler(profile, runner).remove_artifacts() == []
        assert not installed.exists()
