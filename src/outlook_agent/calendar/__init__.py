"""Outlook calendar integration via AppleScript."""

from outlook_agent.calendar.actions import create_event
from outlook_agent.calendar.events import (
    CalendarEvent,
    get_events_today,
    get_upcoming_events,
    search_events,
)

__all__ = [
    # Data classes
    "CalendarEvent",
    # Read operations
    "get_events_today",
    "get_upcoming_events",
    "search_events",
    # Write operations
    "create_event",
]
