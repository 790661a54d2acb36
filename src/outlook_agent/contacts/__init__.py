"""Outlook contacts integration via AppleScript."""

from outlook_agent.contacts.contacts import Contact, list_contacts, search_contacts

__all__ = [
    "Contact",
    "list_contacts",
    "search_contacts",
]
