"""AppleScript execution wrapper for the Outlook integration."""

import subprocess

from outlook_agent.errors import (
    AccessError,
    AutomationError,
    AutomationTimeoutError,
    ValidationError,
)

# Prefix Outlook scripts use to report a caught AppleScript error as text
ERROR_MARKER = "Error:"


def run_applescript(script: str, *, timeout: float | None = None) -> str:
    """
    Execute an AppleScript and return the output.

    Args:
        script: The AppleScript code to execute.
        timeout: Maximum seconds to wait for execution, or None to wait
            for as long as the target application takes.

    Returns:
        The stdout from the AppleScript execution.

    Raises:
        AccessError: If the target application is not running.
        AutomationTimeoutError: If the script did not finish within timeout.
        AutomationError: If the script fails to execute.
    """
    try:
        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise AutomationTimeoutError(f"AppleScript timed out after {timeout}s", script) from e
    except FileNotFoundError as e:
        raise AccessError("osascript not found. This tool requires macOS.") from e

    if result.returncode != 0:
        error_msg = result.stderr.strip() or "Unknown AppleScript error"
        if "-600" in error_msg or "not running" in error_msg.lower():
            raise AccessError(
                "Microsoft Outlook is not running. Please open it and try again."
            )
        raise AutomationError(error_msg, script)

    return result.stdout.strip()


def escape_applescript_string(value: str) -> str:
    """Escape a string for safe inclusion in a double-quoted AppleScript literal.

    Backslashes go first so the escapes added afterwards are not doubled.
    Carriage returns are dropped and line feeds become the ``\\n`` token,
    everything else is left untouched so generated scripts stay readable.
    """
    result = value.replace("\\", "\\\\").replace('"', '\\"')
    result = result.replace("\r", "").replace("\n", "\\n")
    return result


def positive_int(value: int, name: str = "limit") -> int:
    """Coerce a count (limit, days) to int before it is interpolated into a script.

    Raises:
        ValidationError: If the value is below 1.
    """
    value = int(value)
    if value < 1:
        raise ValidationError(f"{name} must be at least 1, got {value}")
    return value


def is_error_result(output: str) -> bool:
    """Check whether script output carries Outlook's error marker."""
    return output.startswith(ERROR_MARKER)
