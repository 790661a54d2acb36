"""Contact retrieval from Outlook.

Reading email addresses and phone numbers fails for some Outlook
configurations, so listing and searching fall back to a names-only query.
"""

import logging
from dataclasses import dataclass

from outlook_agent.applescript import (
    AutomationRunner,
    escape_applescript_string,
    positive_int,
    scrape_entities,
    split_list,
)
from outlook_agent.errors import ParseError, ValidationError
from outlook_agent.strategy import Strategy, StrategyChain

DEFAULT_LIST_LIMIT = 20
DEFAULT_SEARCH_LIMIT = 10

NOT_AVAILABLE = "Not available with simplified method"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    """Represents a contact scraped from Outlook."""

    name: str
    email: str = "No email"
    phone: str = "No phone"

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "Contact":
        """Decode a scraped record, filling defaults for missing fields."""
        name = record.get("name")
        if not name:
            raise ParseError("record has no name")
        return cls(
            name=name,
            email=record.get("email") or "No email",
            phone=record.get("phone") or "No phone",
        )

    @classmethod
    def from_name(cls, name: str) -> "Contact":
        """Contact known only by name (simplified fallback)."""
        return cls(name=name, email=NOT_AVAILABLE, phone=NOT_AVAILABLE)

    def __str__(self) -> str:
        return f"Name: {self.name}\nEmail: {self.email}\nPhone: {self.phone}"


# Appends a full record for theContact to contactList
_CONTACT_RECORD = '''
                set contactData to {name:contactName}
                try
                    set emailList to email addresses of theContact
                    if (count of emailList) > 0 then
                        set contactData to contactData & {email:address of item 1 of emailList}
                    else
                        set contactData to contactData & {email:"No email"}
                    end if
                on error
                    set contactData to contactData & {email:"No email"}
                end try
                try
                    set phoneList to phones of theContact
                    if (count of phoneList) > 0 then
                        set contactData to contactData & {phone:formatted dial string of item 1 of phoneList}
                    else
                        set contactData to contactData & {phone:"No phone"}
                    end if
                on error
                    set contactData to contactData & {phone:"No phone"}
                end try
                set end of contactList to contactData
'''


def build_list_script(limit: int = DEFAULT_LIST_LIMIT) -> str:
    """Script returning up to limit contacts as records."""
    limit = positive_int(limit)
    return f'''
    tell application "Microsoft Outlook"
        set contactList to {{}}
        set allContacts to contacts
        set limitCount to count of allContacts
        if limitCount > {limit} then set limitCount to {limit}
        repeat with i from 1 to limitCount
            try
                set theContact to item i of allContacts
                set contactName to full name of theContact
                {_CONTACT_RECORD}
            on error
                -- Skip contacts Outlook cannot describe
            end try
        end repeat
        return contactList
    end tell
    '''


def build_list_names_script(limit: int = DEFAULT_LIST_LIMIT) -> str:
    """Script returning up to limit contact names as a flat list."""
    limit = positive_int(limit)
    return f'''
    tell application "Microsoft Outlook"
        set contactList to {{}}
        set limitCount to count of contacts
        if limitCount > {limit} then set limitCount to {limit}
        repeat with i from 1 to limitCount
            try
                set end of contactList to full name of item i of contacts
            end try
        end repeat
        return contactList
    end tell
    '''


def build_search_script(search_term: str, limit: int = DEFAULT_SEARCH_LIMIT) -> str:
    """Script returning up to limit contacts whose full name contains search_term."""
    limit = positive_int(limit)
    search_escaped = escape_applescript_string(search_term)
    return f'''
    tell application "Microsoft Outlook"
        set contactList to {{}}
        set i to 0
        set searchString to "{search_escaped}"
        repeat with theContact in contacts
            try
                set contactName to full name of theContact
                if contactName contains searchString then
                    set i to i + 1
                    {_CONTACT_RECORD}
                    if i >= {limit} then exit repeat
                end if
            on error
                -- Skip contacts Outlook cannot describe
            end try
        end repeat
        return contactList
    end tell
    '''


def build_search_names_script(search_term: str, limit: int = DEFAULT_SEARCH_LIMIT) -> str:
    """Script returning up to limit matching contact names as a flat list."""
    limit = positive_int(limit)
    search_escaped = escape_applescript_string(search_term)
    return f'''
    tell application "Microsoft Outlook"
        set contactList to {{}}
        set i to 0
        set searchString to "{search_escaped}"
        repeat with theContact in contacts
            try
                set contactName to full name of theContact
                if contactName contains searchString then
                    set i to i + 1
                    set end of contactList to contactName
                    if i >= {limit} then exit repeat
                end if
            end try
        end repeat
        return contactList
    end tell
    '''


def _records(raw: str) -> list[Contact]:
    return scrape_entities(raw, Contact.from_record, logger)


def _names(raw: str) -> list[Contact]:
    return [Contact.from_name(name) for name in split_list(raw)]


def _run_chain(
    runner: AutomationRunner | None,
    strategies: list[Strategy[list[Contact]]],
    action: str,
) -> list[Contact]:
    runner = runner or AutomationRunner()
    runner.ensure_ready()
    result = StrategyChain(runner, strategies, action=action, log=logger).run()
    logger.info("Found %d contact(s) using %s", len(result.value), result.strategy)
    return result.value


def list_contacts(
    limit: int = DEFAULT_LIST_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[Contact]:
    """
    List contacts, falling back to names only if full records fail.

    Args:
        limit: Maximum number of contacts, enforced inside the script.
        runner: Runner to use (default: a new AutomationRunner).

    Returns:
        List of Contact objects in Outlook's order.
    """
    limit = positive_int(limit)
    strategies = [
        Strategy("records", lambda: build_list_script(limit), _records),
        Strategy("names_only", lambda: build_list_names_script(limit), _names),
    ]
    return _run_chain(runner, strategies, "list contacts")


def search_contacts(
    search_term: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[Contact]:
    """
    Search contacts by full name, falling back to names only if full records fail.

    Raises:
        ValidationError: If search_term is empty.
    """
    if not search_term:
        raise ValidationError("Search term is required for search operation")
    limit = positive_int(limit)
    strategies = [
        Strategy("records", lambda: build_search_script(search_term, limit), _records),
        Strategy(
            "names_only",
            lambda: build_search_names_script(search_term, limit),
            _names,
        ),
    ]
    return _run_chain(runner, strategies, "search contacts")
