"""Calendar event retrieval from Outlook's default calendar."""

import logging
from dataclasses import dataclass

from outlook_agent.applescript import (
    AutomationRunner,
    escape_applescript_string,
    positive_int,
    scrape_entities,
)
from outlook_agent.errors import ParseError, ValidationError

DEFAULT_LIMIT = 10
DEFAULT_DAYS = 7

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarEvent:
    """Represents an event scraped from Outlook.

    Times are kept as the text Outlook returned; their format follows the
    host locale.
    """

    subject: str
    start: str = "Unknown"
    end: str = "Unknown"
    location: str = "No location"
    id: str = ""

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "CalendarEvent":
        """Decode a scraped record, filling defaults for missing fields."""
        subject = record.get("subject")
        if not subject:
            raise ParseError("record has no subject")
        location = record.get("location")
        if not location or location == "missing value":
            location = "No location"
        return cls(
            subject=subject,
            start=record.get("start") or "Unknown",
            end=record.get("end") or "Unknown",
            location=location,
            id=record.get("id", ""),
        )

    def __str__(self) -> str:
        return f"{self.subject}\nTime: {self.start} - {self.end}\nLocation: {self.location}"


# AppleScript record for one event, appended to eventList
_EVENT_RECORD = '''
                set end of eventList to {subject:subject of theEvent, ¬
                    start:start time of theEvent, ¬
                    end:end time of theEvent, ¬
                    location:location of theEvent, ¬
                    id:id of theEvent}
'''


def _build_range_script(range_filter: str, limit: int) -> str:
    return f'''
    tell application "Microsoft Outlook"
        set eventList to {{}}
        set theCalendar to default calendar
        set todayDate to current date
        set startOfToday to todayDate - (time of todayDate)
        {range_filter}
        set limitCount to count of matchingEvents
        if limitCount > {limit} then set limitCount to {limit}
        repeat with i from 1 to limitCount
            set theEvent to item i of matchingEvents
            {_EVENT_RECORD}
        end repeat
        return eventList
    end tell
    '''


def build_today_script(limit: int = DEFAULT_LIMIT) -> str:
    """Script returning up to limit events starting today."""
    limit = positive_int(limit)
    range_filter = (
        "set matchingEvents to events of theCalendar whose start time is greater than or equal to startOfToday "
        "and start time is less than (startOfToday + 1 * days)"
    )
    return _build_range_script(range_filter, limit)


def build_upcoming_script(days: int = DEFAULT_DAYS, limit: int = DEFAULT_LIMIT) -> str:
    """Script returning up to limit events starting between now and days from today."""
    days = positive_int(days, "days")
    limit = positive_int(limit)
    range_filter = (
        "set matchingEvents to events of theCalendar whose start time is greater than or equal to todayDate "
        f"and start time is less than (startOfToday + {days} * days)"
    )
    return _build_range_script(range_filter, limit)


def build_search_script(search_term: str, limit: int = DEFAULT_LIMIT) -> str:
    """Script returning up to limit events whose subject or location contains search_term."""
    limit = positive_int(limit)
    search_escaped = escape_applescript_string(search_term)
    return f'''
    tell application "Microsoft Outlook"
        set eventList to {{}}
        set i to 0
        set searchString to "{search_escaped}"
        repeat with theEvent in events of default calendar
            if (subject of theEvent contains searchString) or (location of theEvent contains searchString) then
                set i to i + 1
                {_EVENT_RECORD}
                if i >= {limit} then exit repeat
            end if
        end repeat
        return eventList
    end tell
    '''


def _fetch(runner: AutomationRunner | None, script: str) -> list[CalendarEvent]:
    runner = runner or AutomationRunner()
    runner.ensure_ready()
    result = runner.execute(script)
    events = scrape_entities(result, CalendarEvent.from_record, logger)
    logger.info("Found %d event(s)", len(events))
    return events


def get_events_today(
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[CalendarEvent]:
    """
    Get events scheduled for today in the default calendar.

    Args:
        limit: Maximum number of events, enforced inside the script.
        runner: Runner to use (default: a new AutomationRunner).

    Returns:
        List of CalendarEvent objects in Outlook's order.
    """
    return _fetch(runner, build_today_script(limit))


def get_upcoming_events(
    days: int = DEFAULT_DAYS,
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[CalendarEvent]:
    """Get events starting within the next days days."""
    return _fetch(runner, build_upcoming_script(days, limit))


def search_events(
    search_term: str,
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[CalendarEvent]:
    """
    Search default-calendar events by subject or location.

    Raises:
        ValidationError: If search_term is empty.
    """
    if not search_term:
        raise ValidationError("Search term is required for search operation")
    return _fetch(runner, build_search_script(search_term, limit))
