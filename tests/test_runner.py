"""Tests for AutomationRunner launch and execute behavior."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from outlook_agent.applescript import AutomationRunner
from outlook_agent.errors import AccessError, AutomationError


def _completed(returncode: int) -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    return result


@pytest.fixture
def app_bundle(tmp_path: Path) -> Path:
    bundle = tmp_path / "Microsoft Outlook.app"
    bundle.mkdir()
    return bundle


class TestEnsureReady:
    """Tests for AutomationRunner.ensure_ready()."""

    @patch("outlook_agent.applescript.runner.time.sleep")
    @patch("outlook_agent.applescript.runner.subprocess.run")
    def test_already_running(self, mock_run, mock_sleep, app_bundle: Path) -> None:
        """A running application is used as-is."""
        mock_run.return_value = _completed(0)

        AutomationRunner(app_path=app_bundle).ensure_ready()

        mock_run.assert_called_once()
        assert mock_run.call_args[0][0] == ["pgrep", "-x", "Microsoft Outlook"]
        mock_sleep.assert_not_called()

    @patch("outlook_agent.applescript.runner.time.sleep")
    @patch("outlook_agent.applescript.runner.subprocess.run")
    def test_launches_when_not_running(self, mock_run, mock_sleep, app_bundle: Path) -> None:
        """A stopped application is launched and given time to settle."""
        mock_run.side_effect = [_completed(1), _completed(0)]

        AutomationRunner(app_path=app_bundle, launch_settle_seconds=0.5).ensure_ready()

        assert mock_run.call_count == 2
        assert mock_run.call_args_list[1][0][0] == ["open", "-a", "Microsoft Outlook"]
        mock_sleep.assert_called_once_with(0.5)

    @patch("outlook_agent.applescript.runner.subprocess.run")
    def test_not_installed(self, mock_run, tmp_path: Path) -> None:
        """A missing bundle is reported without trying to launch anything."""
        runner = AutomationRunner(app_path=tmp_path / "Missing.app")

        with pytest.raises(AccessError, match="not installed"):
            runner.ensure_ready()

        mock_run.assert_not_called()

    @patch("outlook_agent.applescript.runner.time.sleep")
    @patch("outlook_agent.applescript.runner.subprocess.run")
    def test_launch_failure(self, mock_run, mock_sleep, app_bundle: Path) -> None:
        """A failed launch becomes AccessError."""
        mock_run.side_effect = [
            _completed(1),
            subprocess.CalledProcessError(1, ["open", "-a", "Microsoft Outlook"]),
        ]

        with pytest.raises(AccessError, match="Could not activate Microsoft Outlook"):
            AutomationRunner(app_path=app_bundle).ensure_ready()

        mock_sleep.assert_not_called()

    @patch("outlook_agent.applescript.runner.subprocess.run")
    def test_no_app_path_skips_install_check(self, mock_run) -> None:
        """With no bundle path configured only the process check runs."""
        mock_run.return_value = _completed(0)

        runner = AutomationRunner(app_path=None)

        assert runner.is_installed() is True
        runner.ensure_ready()
        mock_run.assert_called_once()


class TestExecute:
    """Tests for AutomationRunner.execute()."""

    @patch("outlook_agent.applescript.runner.run_applescript")
    def test_returns_result(self, mock_script) -> None:
        """Plain results are passed through."""
        mock_script.return_value = "{name:Alex}"

        result = AutomationRunner(timeout=30).execute("script")

        assert result == "{name:Alex}"
        mock_script.assert_called_once_with("script", timeout=30)

    @patch("outlook_agent.applescript.runner.run_applescript")
    def test_error_marker_raises(self, mock_script) -> None:
        """Output starting with the error marker is a failure."""
        mock_script.return_value = "Error: Can't make folder into type specifier."

        with pytest.raises(AutomationError, match="Can't make folder") as exc_info:
            AutomationRunner().execute("the script")

        assert exc_info.value.script == "the script"

    @patch("outlook_agent.applescript.runner.run_applescript")
    def test_marker_only_at_start(self, mock_script) -> None:
        """The marker inside a value does not count as an error."""
        mock_script.return_value = "{subject:Error: build failed, sender:ci}"

        assert AutomationRunner().execute("script").startswith("{subject:")
