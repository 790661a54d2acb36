"""Tests for AppleScript utilities."""

import subprocess
from unittest.mock import patch

import pytest

from outlook_agent.applescript import escape_applescript_string, positive_int, run_applescript
from outlook_agent.errors import (
    AccessError,
    AutomationError,
    AutomationTimeoutError,
    ValidationError,
)


def _decode_literal(escaped: str) -> str:
    """Read escaped text back the way AppleScript reads a string literal body.

    Fails on a bare quote, a dangling backslash or an unknown escape.
    """
    out = []
    i = 0
    while i < len(escaped):
        char = escaped[i]
        if char == '"':
            raise AssertionError(f"unescaped quote at {i} in {escaped!r}")
        if char == "\\":
            nxt = escaped[i + 1 : i + 2]
            if nxt not in ("\\", '"', "n"):
                raise AssertionError(f"unexpected escape at {i} in {escaped!r}")
            out.append({"\\": "\\", '"': '"', "n": "\n"}[nxt])
            i += 2
            continue
        out.append(char)
        i += 1
    return "".join(out)


class TestEscapeAppleScriptString:
    """Tests for AppleScript string escaping."""

    def test_escape_quotes(self) -> None:
        """Test that double quotes are escaped."""
        result = escape_applescript_string('Hello "World"')
        assert result == 'Hello \\"World\\"'

    def test_escape_backslashes(self) -> None:
        """Test that backslashes are escaped."""
        result = escape_applescript_string("path\\to\\file")
        assert result == "path\\\\to\\\\file"

    def test_escape_combined(self) -> None:
        """Test escaping both quotes and backslashes."""
        result = escape_applescript_string('Say "Hello\\World"')
        assert result == 'Say \\"Hello\\\\World\\"'

    def test_backslash_before_quote_not_double_escaped(self) -> None:
        """A trailing backslash must not swallow the escape added for a quote."""
        result = escape_applescript_string('a\\"')
        assert result == 'a\\\\\\"'

    def test_newline_becomes_escape_token(self) -> None:
        """Line feeds become the two-character \\n token."""
        assert escape_applescript_string("line1\nline2") == "line1\\nline2"

    def test_carriage_return_stripped(self) -> None:
        """Carriage returns are removed, CRLF becomes a single \\n."""
        assert escape_applescript_string("line1\r\nline2\r") == "line1\\nline2"

    def test_other_characters_untouched(self) -> None:
        """Tabs, unicode and AppleScript operators pass through unchanged."""
        text = "tab\there & café ¬ {braces}"
        assert escape_applescript_string(text) == text

    def test_no_escape_needed(self) -> None:
        """Test string that needs no escaping."""
        result = escape_applescript_string("Simple text")
        assert result == "Simple text"

    def test_empty_string(self) -> None:
        """Test empty string."""
        result = escape_applescript_string("")
        assert result == ""

    @pytest.mark.parametrize(
        "text",
        [
            '" & (do shell script "rm -rf ~") & "',
            "\\",
            '\\"',
            "\\\\\"\"\n\r\\n",
            'end tell\ndo shell script "id"\ntell application "Finder"',
            "multi\r\nline\r\nbody with \"quotes\" and \\backslashes\\",
        ],
    )
    def test_output_stays_inside_one_literal(self, text: str) -> None:
        """Escaped text has no bare quote or line feed and reads back to the input."""
        result = escape_applescript_string(text)
        assert "\n" not in result
        assert _decode_literal(result) == text.replace("\r", "")


class TestPositiveInt:
    """Tests for positive_int()."""

    def test_coerces(self) -> None:
        assert positive_int("5") == 5
        assert positive_int(1) == 1

    @pytest.mark.parametrize("value", [0, -3])
    def test_rejects_below_one(self, value: int) -> None:
        with pytest.raises(ValidationError, match="days must be at least 1"):
            positive_int(value, "days")


class TestRunAppleScript:
    """Tests for run_applescript()."""

    @patch("outlook_agent.applescript.base.subprocess.run")
    def test_success(self, mock_run) -> None:
        """Successful scripts return stripped stdout."""
        mock_run.return_value.returncode = 0
        mock_run.return_value.stdout = "  Inbox, Drafts \n"

        result = run_applescript('tell application "Microsoft Outlook" to return 1')

        assert result == "Inbox, Drafts"
        args = mock_run.call_args[0][0]
        assert args == ["osascript", "-e", 'tell application "Microsoft Outlook" to return 1']
        assert mock_run.call_args.kwargs["timeout"] is None

    @patch("outlook_agent.applescript.base.subprocess.run")
    def test_script_error(self, mock_run) -> None:
        """A non-zero exit raises AutomationError carrying the script."""
        mock_run.return_value.returncode = 1
        mock_run.return_value.stderr = "execution error: Can't get folder. (-1728)"

        with pytest.raises(AutomationError, match="Can't get folder") as exc_info:
            run_applescript("bad script")

        assert exc_info.value.script == "bad script"

    @patch("outlook_agent.applescript.base.subprocess.run")
    def test_app_not_running(self, mock_run) -> None:
        """Error -600 means the application is not running."""
        mock_run.return_value.returncode = 1
        mock_run.return_value.stderr = "Microsoft Outlook got an error: Application isn't running. (-600)"

        with pytest.raises(AccessError):
            run_applescript("script")

    @patch("outlook_agent.applescript.base.subprocess.run")
    def test_timeout(self, mock_run) -> None:
        """A configured timeout turns a hang into AutomationTimeoutError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["osascript"], timeout=5)

        with pytest.raises(AutomationTimeoutError, match="timed out after 5s"):
            run_applescript("script", timeout=5)

    @patch("outlook_agent.applescript.base.subprocess.run")
    def test_osascript_missing(self, mock_run) -> None:
        """Missing osascript is an access problem, not a script failure."""
        mock_run.side_effect = FileNotFoundError("osascript")

        with pytest.raises(AccessError, match="requires macOS"):
            run_applescript("script")
