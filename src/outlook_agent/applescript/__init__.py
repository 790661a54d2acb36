"""Shared AppleScript execution and parsing infrastructure for Outlook."""

from outlook_agent.applescript.base import (
    ERROR_MARKER,
    escape_applescript_string,
    positive_int,
    run_applescript,
)
from outlook_agent.applescript.records import scrape_entities, scrape_records, split_list
from outlook_agent.applescript.runner import AutomationRunner

__all__ = [
    "ERROR_MARKER",
    "AutomationRunner",
    "escape_applescript_string",
    "positive_int",
    "run_applescript",
    "scrape_entities",
    "scrape_records",
    "split_list",
]
