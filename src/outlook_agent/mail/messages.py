"""Outlook message retrieval and parsing."""

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

DEFAULT_FOLDER = "Inbox"
DEFAULT_LIMIT = 10

# Characters of message content kept by the scripts
CONTENT_PREVIEW_CHARS = 500

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    """Represents a message scraped from Outlook."""

    subject: str = "No subject"
    sender: str = "Unknown sender"
    date_sent: str = "Unknown date"
    content: str = "[Content not available]"
    id: str = ""

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "MailMessage":
        """Decode a scraped record, filling defaults for missing fields."""
        if not record.get("subject") and not record.get("sender"):
            raise ParseError("record has neither subject nor sender")
        defaults = cls()
        return cls(
            subject=record.get("subject") or defaults.subject,
            sender=record.get("sender") or defaults.sender,
            date_sent=record.get("date") or defaults.date_sent,
            content=record.get("content") or defaults.content,
            id=record.get("id", ""),
        )

    @property
    def preview(self) -> str:
        """Get a short preview of the message content."""
        content = self.content[:200].replace("\n", " ").strip()
        return f"{content}..." if len(self.content) > 200 else content

    def __str__(self) -> str:
        return f"[{self.date_sent}] From: {self.sender}\nSubject: {self.subject}\n{self.preview}"


@dataclass(frozen=True)
class FolderName:
    """A mail folder name as listed by Outlook."""

    name: str

    @classmethod
    def from_text(cls, text: str) -> "FolderName":
        name = text.strip()
        if not name:
            raise ParseError("empty folder name")
        return cls(name=name)

    def __str__(self) -> str:
        return self.name


def _folder_lookup(folder: str) -> str:
    """AppleScript that sets theFolder to the named folder, else the inbox."""
    folder_escaped = escape_applescript_string(folder)
    return f'''
        set theFolder to inbox
        try
            repeat with mailFolder in mail folders
                if name of mailFolder is "{folder_escaped}" then
                    set theFolder to mailFolder
                    exit repeat
                end if
            end repeat
        on error
            -- Fall back to inbox on lookup errors
        end try
    '''


def _message_record(var: str) -> str:
    """AppleScript that appends one message record for var to msgList."""
    return f'''
                set msgData to {{subject:subject of {var}, sender:sender of {var}, ¬
                    date:time sent of {var}, id:id of {var}}}
                try
                    set msgContent to content of {var}
                    if length of msgContent > {CONTENT_PREVIEW_CHARS} then
                        set msgContent to (text 1 thru {CONTENT_PREVIEW_CHARS} of msgContent) & "..."
                    end if
                    set msgData to msgData & {{content:msgContent}}
                on error
                    set msgData to msgData & {{content:"[Content not available]"}}
                end try
                set end of msgList to msgData
    '''


def build_folders_script() -> str:
    """Script listing the names of all mail folders."""
    return '''
    tell application "Microsoft Outlook"
        set folderNames to {}
        repeat with theFolder in mail folders
            set end of folderNames to name of theFolder
        end repeat
        return folderNames
    end tell
    '''


def build_unread_script(folder: str = DEFAULT_FOLDER, limit: int = DEFAULT_LIMIT) -> str:
    """Script returning up to limit unread messages from folder."""
    limit = positive_int(limit)
    return f'''
    tell application "Microsoft Outlook"
        try
            {_folder_lookup(folder)}
            set msgList to {{}}
            set i to 0
            repeat with theMessage in messages of theFolder
                if read status of theMessage is false then
                    set i to i + 1
                    {_message_record("theMessage")}
                    if i >= {limit} then exit repeat
                end if
            end repeat
            return msgList
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def build_read_script(folder: str = DEFAULT_FOLDER, limit: int = DEFAULT_LIMIT) -> str:
    """Script returning the first limit messages of folder, read or not."""
    limit = positive_int(limit)
    return f'''
    tell application "Microsoft Outlook"
        try
            {_folder_lookup(folder)}
            set msgList to {{}}
            set allMsgs to messages of theFolder
            set msgCount to count of allMsgs
            if msgCount > {limit} then set msgCount to {limit}
            repeat with i from 1 to msgCount
                try
                    set theMessage to item i of allMsgs
                    {_message_record("theMessage")}
                on error
                    -- Skip messages Outlook cannot describe
                end try
            end repeat
            return msgList
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def build_search_script(
    search_term: str,
    folder: str = DEFAULT_FOLDER,
    limit: int = DEFAULT_LIMIT,
) -> str:
    """Script returning up to limit messages whose subject or content contains search_term."""
    limit = positive_int(limit)
    search_escaped = escape_applescript_string(search_term)
    return f'''
    tell application "Microsoft Outlook"
        try
            {_folder_lookup(folder)}
            set msgList to {{}}
            set i to 0
            set searchString to "{search_escaped}"
            repeat with theMessage in messages of theFolder
                if (subject of theMessage contains searchString) or (content of theMessage contains searchString) then
                    set i to i + 1
                    {_message_record("theMessage")}
                    if i >= {limit} then exit repeat
                end if
            end repeat
            return msgList
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def _run(runner: AutomationRunner | None, script: str) -> str:
    runner = runner or AutomationRunner()
    runner.ensure_ready()
    return runner.execute(script)


def get_unread_messages(
    folder: str = DEFAULT_FOLDER,
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[MailMessage]:
    """
    Retrieve unread messages from a folder.

    Args:
        folder: Folder name; an unknown name falls back to the inbox.
        limit: Maximum number of messages, enforced inside the script.
        runner: Runner to use (default: a new AutomationRunner).

    Returns:
        List of MailMessage objects in Outlook's order.
    """
    logger.info("Getting unread messages from %r (limit %s)", folder, limit)
    result = _run(runner, build_unread_script(folder, limit))
    messages = scrape_entities(result, MailMessage.from_record, logger)
    logger.info("Found %d unread message(s)", len(messages))
    return messages


def get_messages(
    folder: str = DEFAULT_FOLDER,
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[MailMessage]:
    """Retrieve the first messages of a folder regardless of read status."""
    logger.info("Reading messages from %r (limit %s)", folder, limit)
    result = _run(runner, build_read_script(folder, limit))
    return scrape_entities(result, MailMessage.from_record, logger)


def search_messages(
    search_term: str,
    folder: str = DEFAULT_FOLDER,
    limit: int = DEFAULT_LIMIT,
    *,
    runner: AutomationRunner | None = None,
) -> list[MailMessage]:
    """
    Search messages by subject or content.

    Raises:
        ValidationError: If search_term is empty.
    """
    if not search_term:
        raise ValidationError("Search term is required for search operation")
    logger.info("Searching %r for %r (limit %s)", folder, search_term, limit)
    result = _run(runner, build_search_script(search_term, folder, limit))
    messages = scrape_entities(result, MailMessage.from_record, logger)
    logger.info("Found %d matching message(s)", len(messages))
    return messages


def get_mail_folders(*, runner: AutomationRunner | None = None) -> list[FolderName]:
    """Get the names of all mail folders."""
    result = _run(runner, build_folders_script())
    folders = []
    for item in split_list(result):
        try:
            folders.append(FolderName.from_text(item))
        except ParseError as e:
            logger.debug("Skipping folder entry %r: %s", item, e)
    return folders
