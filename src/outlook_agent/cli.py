"""Command-line interface for outlook-agent."""

import json
from pathlib import Path
from typing import Annotated, NoReturn

import pydantic
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from outlook_agent.config import Settings
from outlook_agent.errors import OutlookError
from outlook_agent.logging import setup_logging

app = typer.Typer(
    name="outlook-agent",
    help="Mail, calendar and contacts automation for Microsoft Outlook on macOS",
    no_args_is_help=True,
)
console = Console()

# Sub-command groups
mail_app = typer.Typer(help="Read, search and send email")
calendar_app = typer.Typer(help="View and create calendar events")
contacts_app = typer.Typer(help="List and search contacts")

app.add_typer(mail_app, name="mail")
app.add_typer(calendar_app, name="calendar")
app.add_typer(contacts_app, name="contacts")


def _fail(context: str, error: Exception) -> NoReturn:
    console.print(f"[red]{context}:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def get_settings() -> Settings:
    """Load application settings, exiting on invalid configuration."""
    try:
        return Settings()
    except pydantic.ValidationError as e:
        _fail("Invalid configuration", e)


@app.callback()
def main(
    log: Annotated[
        bool, typer.Option("--log/--no-log", help="Write log files to the log directory")
    ] = True,
) -> None:
    """Configure logging before any command runs."""
    if log:
        settings = get_settings()
        setup_logging(
            log_dir=settings.log_dir,
            log_level=settings.log_level,
            max_bytes=settings.log_rotation_size_mb * 1024 * 1024,
            backup_count=settings.log_backup_count,
        )


@app.command()
def version() -> None:
    """Show version information."""
    from outlook_agent import __version__

    console.print(f"outlook-agent v{__version__}")


@app.command()
def call(
    tool: Annotated[str, typer.Argument(help="Tool name, e.g. outlook_mail")],
    arguments: Annotated[str, typer.Argument(help="Tool arguments as a JSON object")],
) -> None:
    """Invoke a tool the way an agent would and print its text result."""
    from outlook_agent.tools import call_tool

    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        _fail("Invalid JSON arguments", e)

    result = call_tool(tool, parsed, settings=get_settings())
    console.print(result.text, markup=False)
    if result.is_error:
        raise typer.Exit(1)


@app.command()
def tools() -> None:
    """List the tools available to agents."""
    from outlook_agent.tools import tool_definitions

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="green")
    for definition in tool_definitions():
        table.add_row(definition["name"], definition["description"])
    console.print(table)


# === Mail Commands ===


def _print_messages(messages: list, title: str) -> None:
    if not messages:
        console.print("[yellow]No messages found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Date", style="blue", max_width=32)
    table.add_column("From", style="cyan", max_width=30)
    table.add_column("Subject", style="green", max_width=50)
    table.add_column("Preview", max_width=60)

    for msg in messages:
        table.add_row(msg.date_sent, msg.sender[:30], msg.subject[:50], msg.preview[:60])

    console.print(table)


@mail_app.command("unread")
def mail_unread(
    folder: Annotated[str, typer.Option("--folder", "-f", help="Folder name")] = "Inbox",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of messages")] = 10,
) -> None:
    """List unread messages in a folder."""
    from outlook_agent.mail import get_unread_messages

    try:
        messages = get_unread_messages(folder, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error fetching messages", e)

    _print_messages(messages, f"Unread in {folder}")


@mail_app.command("read")
def mail_read(
    folder: Annotated[str, typer.Option("--folder", "-f", help="Folder name")] = "Inbox",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of messages")] = 10,
) -> None:
    """List the first messages in a folder."""
    from outlook_agent.mail import get_messages

    try:
        messages = get_messages(folder, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error fetching messages", e)

    _print_messages(messages, f"Messages in {folder}")


@mail_app.command("search")
def mail_search(
    term: Annotated[str, typer.Argument(help="Text to search for")],
    folder: Annotated[str, typer.Option("--folder", "-f", help="Folder name")] = "Inbox",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of messages")] = 10,
) -> None:
    """Search messages by subject or content."""
    from outlook_agent.mail import search_messages

    try:
        messages = search_messages(term, folder, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error searching messages", e)

    _print_messages(messages, f"Messages matching '{term}'")


@mail_app.command("folders")
def mail_folders() -> None:
    """List mail folders."""
    from outlook_agent.mail import get_mail_folders

    try:
        folders = get_mail_folders(runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error listing folders", e)

    if not folders:
        console.print("[yellow]No mail folders found[/yellow]")
        return

    for folder in folders:
        console.print(f"  {folder}")


@mail_app.command("send")
def mail_send(
    to: Annotated[str, typer.Option("--to", "-t", help="Recipient address")],
    subject: Annotated[str, typer.Option("--subject", "-s", help="Subject line")],
    body: Annotated[str, typer.Option("--body", "-b", help="Message body")],
    cc: Annotated[str | None, typer.Option("--cc", help="CC address")] = None,
    bcc: Annotated[str | None, typer.Option("--bcc", help="BCC address")] = None,
    html: Annotated[bool, typer.Option("--html", help="Body is HTML")] = False,
    attach: Annotated[
        list[Path] | None,
        typer.Option("--attach", "-a", help="File to attach (repeatable)"),
    ] = None,
) -> None:
    """Send a message, leaving a draft open if sending fails."""
    from outlook_agent.mail import send_message

    settings = get_settings()
    try:
        result = send_message(
            to,
            subject,
            body,
            cc=cc,
            bcc=bcc,
            is_html=html,
            attachments=attach,
            guard=settings.path_guard(),
            runner=settings.runner(),
        )
    except OutlookError as e:
        _fail("Send failed", e)

    color = "green" if result.delivered else "yellow"
    console.print(f"[{color}]{result.confirmation}[/{color}]")
    for attempt in result.attempts:
        console.print(f"[dim]  {attempt.strategy}: {'ok' if attempt.success else 'failed'}[/dim]")


# === Calendar Commands ===


def _print_events(events: list, title: str) -> None:
    if not events:
        console.print("[yellow]No events found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Subject", style="cyan", max_width=40)
    table.add_column("Start", style="blue")
    table.add_column("End", style="blue")
    table.add_column("Location", style="green", max_width=30)

    for event in events:
        table.add_row(event.subject, event.start, event.end, event.location)

    console.print(table)


@calendar_app.command("today")
def calendar_today(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max events to show")] = 10,
) -> None:
    """Show today's events."""
    from outlook_agent.calendar import get_events_today

    try:
        events = get_events_today(limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error fetching events", e)

    _print_events(events, "Today")


@calendar_app.command("upcoming")
def calendar_upcoming(
    days: Annotated[int, typer.Option("--days", "-d", help="Days to look ahead")] = 7,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max events to show")] = 10,
) -> None:
    """Show upcoming events."""
    from outlook_agent.calendar import get_upcoming_events

    try:
        events = get_upcoming_events(days, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error fetching events", e)

    _print_events(events, f"Next {days} days")


@calendar_app.command("search")
def calendar_search(
    term: Annotated[str, typer.Argument(help="Text to search for")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max events to show")] = 10,
) -> None:
    """Search events by subject or location."""
    from outlook_agent.calendar import search_events

    try:
        events = search_events(term, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error searching events", e)

    _print_events(events, f"Events matching '{term}'")


@calendar_app.command("create")
def calendar_create(
    subject: Annotated[str, typer.Argument(help="Event title")],
    start: Annotated[str, typer.Option("--start", help="Start time (ISO-8601)")],
    end: Annotated[str, typer.Option("--end", help="End time (ISO-8601)")],
    location: Annotated[str | None, typer.Option("--location", "-l", help="Location")] = None,
    body: Annotated[str | None, typer.Option("--body", "-b", help="Notes")] = None,
    attendees: Annotated[
        str | None, typer.Option("--attendees", help="Comma-separated attendee addresses")
    ] = None,
) -> None:
    """Create an event in the default calendar."""
    from outlook_agent.calendar import create_event

    try:
        result = create_event(
            subject,
            start,
            end,
            location=location,
            body=body,
            attendees=attendees,
            runner=get_settings().runner(),
        )
    except OutlookError as e:
        _fail("Error creating event", e)

    console.print(f"[green]{result}[/green]")


# === Contacts Commands ===


def _print_contacts(contacts: list, title: str) -> None:
    if not contacts:
        console.print("[yellow]No contacts found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("Phone", style="blue")

    for contact in contacts:
        table.add_row(contact.name, contact.email, contact.phone)

    console.print(table)


@contacts_app.command("list")
def contacts_list(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max contacts to show")] = 20,
) -> None:
    """List contacts."""
    from outlook_agent.contacts import list_contacts

    try:
        contacts = list_contacts(limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error listing contacts", e)

    _print_contacts(contacts, "Contacts")


@contacts_app.command("search")
def contacts_search(
    term: Annotated[str, typer.Argument(help="Text to search for in names")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max contacts to show")] = 10,
) -> None:
    """Search contacts by name."""
    from outlook_agent.contacts import search_contacts

    try:
        contacts = search_contacts(term, limit, runner=get_settings().runner())
    except OutlookError as e:
        _fail("Error searching contacts", e)

    _print_contacts(contacts, f"Contacts matching '{term}'")


if __name__ == "__main__":
    app()
