"""Tests for the provisioned trigger script."""

from unittest.mock import patch

import pytest

from power_schedule import trigger


class TestBuildCommand:
    @pytest.mark.parametrize(
        "action,platform,expected",
        [
            ("shutdown", "win32", ["shutdown", "/s", "/t", "0"]),
            ("restart", "win32", ["shutdown", "/r", "/t", "0"]),
            ("shutdown", "linux", ["shutdown", "-h", "now"]),
            ("restart", "darwin", ["shutdown", "-r", "now"]),
        ],
    )
    def test_commands(self, action, platform, expected):
        assert trigger.build_command(action, platform) == expected


class TestMain:
    """Invocation shape: <interpreter> <script> -Action shutdown|restart."""

    @patch("power_schedule.trigger.subprocess.call", return_value=0)
    def test_runs_shutdown_command(self, mock_call):
        assert trigger.main(["-Action", "Restart"]) == 0
        mock_call.assert_called_once_with(trigger.build_command("restart"))

    @patch("power_schedule.trigger.subprocess.call", return_value=3)
    def test_returns_command_exit_status(self, mock_call):
        assert trigger.main(["-Action", "shutdown"]) == 3

    @patch("power_schedule.trigger.subprocess.call", side_effect=FileNotFoundError)
    def test_missing_shutdown_binary(self, mock_call):
        assert trigger.main(["-Action", "shutdown"]) == 127

    @pytest.mark.parametrize("argv", [[], ["-Action", "hibernate"]])
    @patch("power_schedule.trigger.subprocess.call")
    def test_rejects_bad_arguments(self, mock_call, argv):
        with pytest.raises(SystemExit) as exc_info:
            trigger.main(argv)
        assert exc_info.value.code == 2
        mock_call.assert_not_called()
