"""Launch-and-execute wrapper around Microsoft Outlook's scripting interface."""

import logging
import subprocess
import time
from pathlib import Path

from outlook_agent.applescript.base import is_error_result, run_applescript
from outlook_agent.errors import AccessError, AutomationError

DEFAULT_APP_NAME = "Microsoft Outlook"
DEFAULT_APP_PATH = Path("/Applications/Microsoft Outlook.app")

# Best-effort wait after launching; Outlook has no readiness signal
DEFAULT_LAUNCH_SETTLE_SECONDS = 2.0

logger = logging.getLogger(__name__)


class AutomationRunner:
    """Runs AppleScript commands against a single target application.

    Every operation calls ensure_ready() before execute(). There is no
    locking: two overlapping callers are serialized only by the target.
    """

    def __init__(
        self,
        app_name: str = DEFAULT_APP_NAME,
        app_path: Path | None = DEFAULT_APP_PATH,
        *,
        launch_settle_seconds: float = DEFAULT_LAUNCH_SETTLE_SECONDS,
        timeout: float | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.app_name = app_name
        self.app_path = app_path
        self.launch_settle_seconds = launch_settle_seconds
        self.timeout = timeout
        self.log = log or logger

    def is_installed(self) -> bool:
        """Check for the application bundle (skipped when no path is configured)."""
        if self.app_path is None:
            return True
        return self.app_path.exists()

    def is_running(self) -> bool:
        """Check whether the application process exists."""
        result = subprocess.run(["pgrep", "-x", self.app_name], capture_output=True)
        return result.returncode == 0

    def ensure_ready(self) -> None:
        """
        Make sure the target application is installed and running.

        Launches the application if needed and waits a fixed settle delay.

        Raises:
            AccessError: If the application is not installed or fails to launch.
        """
        if not self.is_installed():
            self.log.error("%s is not installed at %s", self.app_name, self.app_path)
            raise AccessError(
                f"{self.app_name} is not installed on this system", self.app_name
            )

        if self.is_running():
            self.log.debug("%s is already running", self.app_name)
            return

        self.log.info("%s is not running, attempting to launch", self.app_name)
        try:
            subprocess.run(["open", "-a", self.app_name], check=True, capture_output=True)
        except (subprocess.CalledProcessError, OSError) as e:
            self.log.error("Could not launch %s: %s", self.app_name, e)
            raise AccessError(
                f"Could not activate {self.app_name}. Please start it manually.",
                self.app_name,
            ) from e

        time.sleep(self.launch_settle_seconds)

    def execute(self, script: str) -> str:
        """
        Run one AppleScript command and return its textual result.

        Args:
            script: Complete AppleScript source.

        Returns:
            The stripped result text.

        Raises:
            AccessError: If the application reports it is not running.
            AutomationError: If the script fails or returns Outlook's error marker.
        """
        output = run_applescript(script, timeout=self.timeout)
        self.log.debug("Raw result length: %d", len(output))

        if is_error_result(output):
            raise AutomationError(output, script)

        return output
