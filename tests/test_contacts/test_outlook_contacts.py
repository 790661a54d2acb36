"""Tests for contact retrieval and its names-only fallback."""

from unittest.mock import MagicMock

import pytest

from outlook_agent.contacts import Contact, list_contacts, search_contacts
from outlook_agent.contacts.contacts import (
    NOT_AVAILABLE,
    build_list_script,
    build_search_script,
)
from outlook_agent.errors import AutomationError, ValidationError


class TestContactScripts:
    """Tests for the generated contact scripts."""

    def test_list_limit(self) -> None:
        assert "if limitCount > 5 then set limitCount to 5" in build_list_script(5)

    def test_search_escaped(self) -> None:
        script = build_search_script('O"Brien', 3)

        assert 'set searchString to "O\\"Brien"' in script
        assert "if i >= 3 then exit repeat" in script


class TestListContacts:
    """Tests for list_contacts()."""

    def test_records(self, runner: MagicMock) -> None:
        runner.execute.return_value = (
            "{name:Alex Smith, email:alex@example.com, phone:555-0100}, {name:Sam Lee}"
        )

        contacts = list_contacts(runner=runner)

        assert contacts == [
            Contact("Alex Smith", "alex@example.com", "555-0100"),
            Contact("Sam Lee", "No email", "No phone"),
        ]
        assert "if limitCount > 20 then" in runner.execute.call_args[0][0]

    def test_returns_everything_outlook_sends(self, runner: MagicMock) -> None:
        """The limit lives in the script; extra records are not cut client-side."""
        runner.execute.return_value = ", ".join(f"{{name:Person {i}}}" for i in range(7))

        assert len(list_contacts(5, runner=runner)) == 7

    def test_names_fallback(self, runner: MagicMock) -> None:
        runner.execute.side_effect = [
            AutomationError("Error: Can't get email addresses"),
            "Alex Smith, Sam Lee",
        ]

        contacts = list_contacts(runner=runner)

        assert [c.name for c in contacts] == ["Alex Smith", "Sam Lee"]
        assert all(c.email == NOT_AVAILABLE and c.phone == NOT_AVAILABLE for c in contacts)
        assert runner.execute.call_count == 2

    def test_both_strategies_fail(self, runner: MagicMock) -> None:
        runner.execute.side_effect = [AutomationError("Error: a"), AutomationError("Error: b")]

        with pytest.raises(AutomationError, match="Could not list contacts"):
            list_contacts(runner=runner)


class TestSearchContacts:
    """Tests for search_contacts()."""

    def test_search(self, runner: MagicMock) -> None:
        runner.execute.return_value = "{name:Alex Smith, email:alex@example.com}"

        contacts = search_contacts("Alex", runner=runner)

        assert contacts[0].email == "alex@example.com"
        assert contacts[0].phone == "No phone"

    def test_requires_term(self, runner: MagicMock) -> None:
        with pytest.raises(ValidationError):
            search_contacts("", runner=runner)

        assert runner.method_calls == []
