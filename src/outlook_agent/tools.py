"""Named operations exposed to an agent, with text-or-error results.

Each tool takes a plain mapping of arguments, validates it against a
request model before any Outlook work begins, and always answers with a
ToolResult; errors come back as text with ``is_error`` set.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from outlook_agent.applescript import AutomationRunner
from outlook_agent.calendar import (
    create_event,
    get_events_today,
    get_upcoming_events,
    search_events,
)
from outlook_agent.config import Settings
from outlook_agent.contacts import list_contacts, search_contacts
from outlook_agent.errors import OutlookError
from outlook_agent.mail import (
    get_mail_folders,
    get_messages,
    get_unread_messages,
    search_messages,
    send_message,
)

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Text payload handed back to the protocol layer."""

    text: str
    is_error: bool = False
    items: list[Any] = field(default_factory=list)


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def _require(self, *names: str, message: str) -> None:
        if any(not getattr(self, name) for name in names):
            raise ValueError(message)


class MailRequest(_Request):
    """Arguments of the outlook_mail tool."""

    operation: Literal["unread", "search", "send", "folders", "read"] = Field(
        description="Operation to perform"
    )
    folder: str | None = Field(
        default=None, description="Email folder to use (default: Inbox)"
    )
    limit: int = Field(default=10, ge=1, description="Number of emails to retrieve")
    search_term: str | None = Field(
        default=None, alias="searchTerm", description="Text to search for in emails"
    )
    to: str | None = Field(default=None, description="Recipient email address")
    subject: str | None = Field(default=None, description="Email subject")
    body: str | None = Field(default=None, description="Email body content")
    is_html: bool = Field(
        default=False, alias="isHtml", description="Whether the body content is HTML"
    )
    cc: str | None = Field(default=None, description="CC email address")
    bcc: str | None = Field(default=None, description="BCC email address")
    attachments: list[str] | None = Field(
        default=None, description="File paths to attach to the email"
    )

    @model_validator(mode="after")
    def _check_required(self) -> "MailRequest":
        if self.operation == "search":
            self._require(
                "search_term", message="Search term is required for search operation"
            )
        elif self.operation == "send":
            self._require(
                "to",
                "subject",
                "body",
                message="Recipient (to), subject, and body are required for send operation",
            )
        return self


class CalendarRequest(_Request):
    """Arguments of the outlook_calendar tool."""

    operation: Literal["today", "upcoming", "search", "create"] = Field(
        description="Operation to perform"
    )
    limit: int = Field(default=10, ge=1, description="Number of events to retrieve")
    days: int = Field(
        default=7, ge=1, description="Number of days to look ahead for upcoming events"
    )
    search_term: str | None = Field(
        default=None, alias="searchTerm", description="Text to search for in events"
    )
    subject: str | None = Field(default=None, description="Event subject/title")
    start: str | None = Field(default=None, description="Start time in ISO format")
    end: str | None = Field(default=None, description="End time in ISO format")
    location: str | None = Field(default=None, description="Event location")
    body: str | None = Field(default=None, description="Event description/body")
    attendees: str | None = Field(
        default=None, description="Comma-separated list of attendee email addresses"
    )

    @model_validator(mode="after")
    def _check_required(self) -> "CalendarRequest":
        if self.operation == "search":
            self._require(
                "search_term", message="Search term is required for search operation"
            )
        elif self.operation == "create":
            self._require(
                "subject",
                "start",
                "end",
                message="Subject, start time, and end time are required for create operation",
            )
        return self


class ContactsRequest(_Request):
    """Arguments of the outlook_contacts tool."""

    operation: Literal["list", "search"] = Field(description="Operation to perform")
    search_term: str | None = Field(
        default=None, alias="searchTerm", description="Text to search for in contacts"
    )
    limit: int | None = Field(
        default=None, ge=1, description="Number of contacts to retrieve"
    )

    @model_validator(mode="after")
    def _check_required(self) -> "ContactsRequest":
        if self.operation == "search":
            self._require(
                "search_term", message="Search term is required for search operation"
            )
        return self


def _in_folder(folder: str | None) -> str:
    return f' in folder "{folder}"' if folder else ""


def _listing(items: list[Any], found: str, empty: str) -> ToolResult:
    if not items:
        return ToolResult(empty)
    body = "\n\n".join(str(item) for item in items)
    return ToolResult(f"{found}\n\n{body}", items=list(items))


def handle_mail(
    request: MailRequest, settings: Settings, runner: AutomationRunner
) -> ToolResult:
    folder = request.folder or "Inbox"
    where = _in_folder(request.folder)

    if request.operation == "unread":
        emails = get_unread_messages(folder, request.limit, runner=runner)
        return _listing(
            emails,
            f"Found {len(emails)} unread email(s){where}",
            f"No unread emails found{where}",
        )

    if request.operation == "read":
        emails = get_messages(folder, request.limit, runner=runner)
        return _listing(
            emails, f"Found {len(emails)} email(s){where}", f"No emails found{where}"
        )

    if request.operation == "search":
        emails = search_messages(request.search_term, folder, request.limit, runner=runner)
        return _listing(
            emails,
            f'Found {len(emails)} email(s) for "{request.search_term}"{where}',
            f'No emails found for "{request.search_term}"{where}',
        )

    if request.operation == "folders":
        folders = get_mail_folders(runner=runner)
        if not folders:
            return ToolResult(
                "No mail folders found. Make sure Outlook is running and properly configured."
            )
        names = "\n".join(str(f) for f in folders)
        return ToolResult(f"Found {len(folders)} mail folders:\n\n{names}", items=folders)

    result = send_message(
        request.to,
        request.subject,
        request.body,
        cc=request.cc,
        bcc=request.bcc,
        is_html=request.is_html,
        attachments=request.attachments,
        guard=settings.path_guard(),
        runner=runner,
    )
    return ToolResult(result.confirmation, items=result.attempts)


def handle_calendar(
    request: CalendarRequest, settings: Settings, runner: AutomationRunner
) -> ToolResult:
    if request.operation == "today":
        events = get_events_today(request.limit, runner=runner)
        return _listing(
            events, f"Found {len(events)} event(s) for today:", "No events found for today"
        )

    if request.operation == "upcoming":
        events = get_upcoming_events(request.days, request.limit, runner=runner)
        return _listing(
            events,
            f"Found {len(events)} upcoming event(s) for the next {request.days} days:",
            f"No upcoming events found for the next {request.days} days",
        )

    if request.operation == "search":
        events = search_events(request.search_term, request.limit, runner=runner)
        return _listing(
            events,
            f'Found {len(events)} event(s) matching "{request.search_term}":',
            f'No events found matching "{request.search_term}"',
        )

    confirmation = create_event(
        request.subject,
        request.start,
        request.end,
        location=request.location,
        body=request.body,
        attendees=request.attendees,
        runner=runner,
    )
    return ToolResult(confirmation)


def handle_contacts(
    request: ContactsRequest, settings: Settings, runner: AutomationRunner
) -> ToolResult:
    if request.operation == "list":
        contacts = list_contacts(request.limit or 20, runner=runner)
        return _listing(
            contacts, f"Found {len(contacts)} contact(s):", "No contacts found"
        )

    contacts = search_contacts(request.search_term, request.limit or 10, runner=runner)
    return _listing(
        contacts,
        f'Found {len(contacts)} contact(s) matching "{request.search_term}":',
        f'No contacts found matching "{request.search_term}"',
    )


@dataclass(frozen=True)
class ToolSpec:
    """A named tool: its request model and handler."""

    name: str
    description: str
    request_model: type[_Request]
    handler: Callable[[Any, Settings, AutomationRunner], ToolResult]

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.request_model.model_json_schema(by_alias=True)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            "outlook_mail",
            "Interact with Microsoft Outlook for macOS - read, search, send, and manage emails",
            MailRequest,
            handle_mail,
        ),
        ToolSpec(
            "outlook_calendar",
            "Interact with Microsoft Outlook for macOS calendar - view, create, and manage events",
            CalendarRequest,
            handle_calendar,
        ),
        ToolSpec(
            "outlook_contacts",
            "Search and retrieve contacts from Microsoft Outlook for macOS",
            ContactsRequest,
            handle_contacts,
        ),
    )
}


def tool_definitions() -> list[dict[str, Any]]:
    """Name, description and JSON schema of every tool."""
    return [
        {"name": t.name, "description": t.description, "inputSchema": t.input_schema}
        for t in TOOLS.values()
    ]


def _describe_validation_error(error: pydantic.ValidationError) -> str:
    messages = []
    for err in error.errors():
        msg = err["msg"].removeprefix("Value error, ")
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages)


def call_tool(
    name: str,
    arguments: Any,
    *,
    settings: Settings | None = None,
    runner: AutomationRunner | None = None,
) -> ToolResult:
    """
    Validate arguments and run one tool.

    Args:
        name: Tool name (outlook_mail, outlook_calendar, outlook_contacts).
        arguments: Raw arguments as received from the protocol layer; anything
            other than a non-empty mapping is rejected.
        settings: Settings to use (default: loaded from the environment).
        runner: Runner to use (default: built from settings).

    Returns:
        The tool's ToolResult. Never raises for request, configuration or
        Outlook errors.
    """
    spec = TOOLS.get(name)
    if spec is None:
        return ToolResult(f"Unknown tool: {name}", is_error=True)
    if not arguments:
        return ToolResult("Error: No arguments provided", is_error=True)
    if not isinstance(arguments, Mapping):
        return ToolResult(
            f"Error: Invalid arguments for {name}: expected an object, "
            f"got {type(arguments).__name__}",
            is_error=True,
        )

    try:
        request = spec.request_model.model_validate(dict(arguments))
    except pydantic.ValidationError as e:
        logger.warning("Invalid arguments for %s: %s", name, e)
        return ToolResult(
            f"Error: Invalid arguments for {name}: {_describe_validation_error(e)}",
            is_error=True,
        )

    logger.info("%s operation: %s", name, request.operation)
    if settings is None:
        try:
            settings = Settings()
        except pydantic.ValidationError as e:
            logger.error("Invalid configuration: %s", e)
            return ToolResult(
                f"Error: Invalid configuration: {_describe_validation_error(e)}",
                is_error=True,
            )
    runner = runner or settings.runner()

    try:
        return spec.handler(request, settings, runner)
    except OutlookError as e:
        logger.error("%s %s failed: %s", name, request.operation, e)
        return ToolResult(f"Error: {e}", is_error=True)
