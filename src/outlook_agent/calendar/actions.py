"""Write operations for Outlook's calendar.

Outlook's AppleScript ``date "..."`` literals are interpreted in the host
locale and time zone, so event times are rendered from local wall-clock
components rather than as absolute timestamps.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from outlook_agent.applescript import AutomationRunner, escape_applescript_string
from outlook_agent.errors import ValidationError

logger = logging.getLogger(__name__)


def parse_event_time(value: datetime | str, field_name: str = "time") -> datetime:
    """
    Turn a datetime or ISO-8601 string into a local wall-clock datetime.

    Aware values are converted to the host's local time zone; naive values
    are taken as already local.

    Raises:
        ValidationError: If a string is not valid ISO-8601.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError(f"Invalid {field_name} {value!r}: expected ISO-8601") from e

    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def format_applescript_date(value: datetime) -> str:
    """Render a local datetime as an AppleScript date literal."""
    return f'date "{value.strftime("%m/%d/%Y %H:%M:%S")}"'


def split_attendees(attendees: str | Iterable[str] | None) -> list[str]:
    """Split a comma-separated attendee string, dropping blanks."""
    if not attendees:
        return []
    if isinstance(attendees, str):
        attendees = attendees.split(",")
    return [a.strip() for a in attendees if a.strip()]


def build_create_event_script(
    subject: str,
    start: datetime,
    end: datetime,
    location: str | None = None,
    body: str | None = None,
    attendees: Iterable[str] = (),
) -> str:
    """Script creating an event in the default calendar with optional attendees."""
    props = [
        f'subject:"{escape_applescript_string(subject)}"',
        f"start time:{format_applescript_date(start)}",
        f"end time:{format_applescript_date(end)}",
    ]
    if location:
        props.append(f'location:"{escape_applescript_string(location)}"')
    if body:
        props.append(f'content:"{escape_applescript_string(body)}"')
    props_str = ", ".join(props)

    attendee_lines = "".join(
        f'''
        make new attendee at newEvent with properties {{email address:{{address:"{escape_applescript_string(a)}"}}}}'''
        for a in attendees
    )

    return f'''
    tell application "Microsoft Outlook"
        try
            set newEvent to make new calendar event at default calendar with properties {{{props_str}}}
            {attendee_lines}
            save newEvent
            return "Event created successfully"
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def create_event(
    subject: str,
    start: datetime | str,
    end: datetime | str,
    location: str | None = None,
    body: str | None = None,
    attendees: str | Iterable[str] | None = None,
    *,
    runner: AutomationRunner | None = None,
) -> str:
    """
    Create a calendar event in the default calendar.

    Args:
        subject: Event title.
        start: Start time, datetime or ISO-8601 string.
        end: End time, datetime or ISO-8601 string.
        location: Event location.
        body: Event notes.
        attendees: Comma-separated addresses or an iterable of addresses.
        runner: Runner to use (default: a new AutomationRunner).

    Returns:
        Outlook's confirmation text.

    Raises:
        ValidationError: If a required field is missing or the times are invalid.
        AccessError: If Outlook cannot be reached.
        AutomationError: If event creation fails.

    Example:
        >>> create_event(
        ...     "Team Meeting",
        ...     "2025-01-10T14:00:00",
        ...     "2025-01-10T15:00:00",
        ...     location="Conference Room A",
        ...     attendees="alex@example.com, sam@example.com",
        ... )
    """
    if not subject or not start or not end:
        raise ValidationError(
            "Subject, start time, and end time are required for create operation"
        )

    start_dt = parse_event_time(start, "start time")
    end_dt = parse_event_time(end, "end time")
    if end_dt < start_dt:
        raise ValidationError(f"End time {end_dt} is before start time {start_dt}")

    attendee_list = split_attendees(attendees)
    script = build_create_event_script(
        subject, start_dt, end_dt, location, body, attendee_list
    )

    logger.info("Creating event %r from %s to %s", subject, start_dt, end_dt)
    runner = runner or AutomationRunner()
    runner.ensure_ready()
    result = runner.execute(script)
    return result or "Event created successfully"
