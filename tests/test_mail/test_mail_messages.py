"""Tests for message retrieval."""

from unittest.mock import MagicMock

import pytest

from outlook_agent.errors import AutomationError, ValidationError
from outlook_agent.mail import (
    MailMessage,
    get_mail_folders,
    get_messages,
    get_unread_messages,
    search_messages,
)
from outlook_agent.mail.messages import (
    build_read_script,
    build_search_script,
    build_unread_script,
)


class TestMailMessage:
    """Tests for the MailMessage entity."""

    def test_from_record(self) -> None:
        msg = MailMessage.from_record(
            {"subject": "Hi", "sender": "alex@example.com", "date": "Monday", "id": "7"}
        )

        assert msg.subject == "Hi"
        assert msg.sender == "alex@example.com"
        assert msg.date_sent == "Monday"
        assert msg.id == "7"

    def test_preview_truncates(self) -> None:
        msg = MailMessage(content="x" * 250)

        assert msg.preview == "x" * 200 + "..."

    def test_preview_flattens_newlines(self) -> None:
        assert MailMessage(content="line1\nline2").preview == "line1 line2"


class TestMailScripts:
    """Tests for the generated retrieval scripts."""

    def test_folder_name_escaped(self) -> None:
        """A hostile folder name cannot close the string literal."""
        script = build_unread_script('Evil" & (do shell script "id") & "', 5)

        assert 'name of mailFolder is "Evil\\" & (do shell script \\"id\\") & \\""' in script

    def test_falls_back_to_inbox(self) -> None:
        script = build_read_script("Archive", 3)

        assert "set theFolder to inbox" in script
        assert 'name of mailFolder is "Archive"' in script
        assert "if msgCount > 3 then set msgCount to 3" in script

    def test_limit_in_script(self) -> None:
        assert "if i >= 5 then exit repeat" in build_unread_script("Inbox", 5)

    def test_search_term_escaped(self) -> None:
        script = build_search_script('say "hi"\nnow', "Inbox", 2)

        assert 'set searchString to "say \\"hi\\"\\nnow"' in script

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            build_unread_script("Inbox", 0)


class TestGetMessages:
    """Tests for the retrieval operations."""

    def test_unread(self, runner: MagicMock, unread_output: str) -> None:
        """The runner is readied, then one script runs."""
        runner.execute.return_value = unread_output

        messages = get_unread_messages("Inbox", 10, runner=runner)

        assert [m.subject for m in messages] == ["Project Update", "Lunch?"]
        assert messages[0].date_sent == "Friday 10 January 2025 10:30:00"
        assert [call[0] for call in runner.method_calls] == ["ensure_ready", "execute"]

    def test_nested_sender_record_still_decoded(self, runner: MagicMock) -> None:
        """Outlook's sender record does not make the message disappear."""
        runner.execute.return_value = (
            "{subject:Hi, sender:{name:Alex, address:a@x.com}, date:D, id:1, content:C}"
        )

        messages = get_unread_messages(runner=runner)

        assert len(messages) == 1
        assert messages[0].subject == "Hi"
        assert messages[0].sender.startswith("{name:Alex")

    def test_read(self, runner: MagicMock, unread_output: str) -> None:
        runner.execute.return_value = unread_output

        messages = get_messages("Inbox", 2, runner=runner)

        assert len(messages) == 2
        assert "item i of allMsgs" in runner.execute.call_args[0][0]

    def test_empty_folder(self, runner: MagicMock) -> None:
        runner.execute.return_value = ""

        assert get_unread_messages(runner=runner) == []

    def test_search_requires_term(self, runner: MagicMock) -> None:
        """An empty term is rejected before Outlook is touched."""
        with pytest.raises(ValidationError, match="Search term is required"):
            search_messages("", runner=runner)

        assert runner.method_calls == []

    def test_bad_limit_not_sent(self, runner: MagicMock) -> None:
        with pytest.raises(ValidationError):
            get_unread_messages("Inbox", 0, runner=runner)

        runner.execute.assert_not_called()

    def test_search(self, runner: MagicMock, unread_output: str) -> None:
        runner.execute.return_value = unread_output

        messages = search_messages("Project", runner=runner)

        assert len(messages) == 2
        assert 'set searchString to "Project"' in runner.execute.call_args[0][0]

    def test_automation_error_propagates(self, runner: MagicMock) -> None:
        runner.execute.side_effect = AutomationError("Error: folder gone")

        with pytest.raises(AutomationError, match="folder gone"):
            get_unread_messages(runner=runner)

    def test_folders(self, runner: MagicMock) -> None:
        runner.execute.return_value = "Inbox, Sent Items, Deleted Items"

        folders = get_mail_folders(runner=runner)

        assert [str(f) for f in folders] == ["Inbox", "Sent Items", "Deleted Items"]
