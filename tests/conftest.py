"""Pytest configuration and fixtures for power-schedule tests.

Nothing here touches the real scheduler or system directories: settings
point every install location into tmp_path, the packaged templates are
copied before being edited, and external commands go to a recording fake.
"""

import io
import os
import shutil
from typing import Dict, List, Sequence, Tuple

import pytest
from rich.console import Console

from power_schedule import messaging
from power_schedule.models import CommandResult
from power_schedule.settings import DEFAULT_TEMPLATE_DIR, Settings, clear_settings_cache


class FakeRunner:
    """Records commands and answers with canned results.

    ``responses`` maps an argument prefix to (returncode, stderr); the first
    matching prefix wins and anything unmatched succeeds.
    """

    def __init__(self, responses: Dict[Tuple[str, ...], Tuple[int, str]] = None):
        self.calls: List[List[str]] = []
        self.responses = responses or {}

    def __call__(self, args: Sequence[str]) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append(args)
        for prefix, (returncode, stderr) in self.responses.items():
            if tuple(args[: len(prefix)]) == prefix:
                return CommandResult(args=args, returncode=returncode, stderr=stderr)
        return CommandResult(args=args, returncode=0)

    def commands(self, program: str) -> List[List[str]]:
        return [call for call in self.calls if call[0] == program]


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    """Drop POWER_SCHEDULE_* variables and the cached settings around each test."""
    for key in list(os.environ):
        if key.upper().startswith("POWER_SCHEDULE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def captured_output():
    """Route emitted messages into in-memory consoles."""
    out = Console(file=io.StringIO(), width=400, soft_wrap=True, highlight=False)
    err = Console(file=io.StringIO(), width=400, soft_wrap=True, highlight=False)
    renderer = messaging.ConsoleRenderer(console=out, error_console=err)
    messaging.set_renderer(renderer)
    yield renderer
    messaging.set_renderer(None)


@pytest.fixture
def no_chown(monkeypatch):
    """Let provisioning "chown to root" succeed when tests aren't root."""
    calls = []
    monkeypatch.setattr(os, "chown", lambda path, uid, gid: calls.append((path, uid, gid)), raising=False)
    return calls


@pytest.fixture
def template_dir(tmp_path):
    """A private copy of the packaged configuration templates."""
    target = tmp_path / "templates"
    shutil.copytree(DEFAULT_TEMPLATE_DIR, target)
    return target


@pytest.fixture
def system_dirs(tmp_path):
    dirs = {
        "install_dir": tmp_path / "bin",
        "launch_daemons_dir": tmp_path / "LaunchDaemons",
        "systemd_unit_dir": tmp_path / "systemd",
        "program_data_dir": tmp_path / "ProgramData",
    }
    for name in ("install_dir", "launch_daemons_dir", "systemd_unit_dir"):
        dirs[name].mkdir()
    return dirs


@pytest.fixture
def settings(template_dir, system_dirs):
    return Settings(
        template_dir=template_dir,
        interpreter="/usr/bin/python3",
        **system_dirs,
    )


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for FakeRunners with canned failures."""
    return FakeRunner
