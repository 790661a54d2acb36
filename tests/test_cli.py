"""Tests for the command-line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from outlook_agent.cli import app
from outlook_agent.errors import AutomationError
from outlook_agent.mail import SendResult
from outlook_agent.strategy import AttemptOutcome

cli = CliRunner()


class TestCli:
    """Tests for top-level commands."""

    def test_version(self) -> None:
        result = cli.invoke(app, ["--no-log", "version"])

        assert result.exit_code == 0
        assert "outlook-agent v0.1.0" in result.output

    def test_tools(self) -> None:
        result = cli.invoke(app, ["--no-log", "tools"])

        assert result.exit_code == 0
        assert "outlook_mail" in result.output
        assert "outlook_contacts" in result.output

    def test_call_invalid_arguments(self) -> None:
        """Validation errors are printed and exit non-zero."""
        result = cli.invoke(app, ["--no-log", "call", "outlook_mail", '{"operation": "search"}'])

        assert result.exit_code == 1
        assert "Search term is required" in result.output

    def test_call_invalid_json(self) -> None:
        result = cli.invoke(app, ["--no-log", "call", "outlook_mail", "{not json"])

        assert result.exit_code == 1
        assert "Invalid JSON arguments" in result.output


    def test_invalid_configuration(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_ATTACHMENT_BYTES", "lots")

        result = cli.invoke(app, ["--no-log", "mail", "folders"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestMailCommands:
    """Tests for mail subcommands."""

    @patch("outlook_agent.mail.send_message")
    def test_send(self, mock_send) -> None:
        mock_send.return_value = SendResult(
            "Email sent successfully using a draft window",
            [
                AttemptOutcome("compose_attach", False, "Error: nope"),
                AttemptOutcome("draft_window", True, "Email sent successfully using a draft window"),
            ],
        )

        result = cli.invoke(
            app,
            ["--no-log", "mail", "send", "--to", "alex@example.com", "-s", "Hi", "-b", "Hello"],
        )

        assert result.exit_code == 0
        assert "draft window" in result.output
        assert "compose_attach: failed" in result.output
        assert mock_send.call_args[0] == ("alex@example.com", "Hi", "Hello")

    @patch("outlook_agent.mail.get_unread_messages")
    def test_unread_error(self, mock_unread) -> None:
        mock_unread.side_effect = AutomationError("Error: Outlook got an error")

        result = cli.invoke(app, ["--no-log", "mail", "unread"])

        assert result.exit_code == 1
        assert "Error fetching messages" in result.output
