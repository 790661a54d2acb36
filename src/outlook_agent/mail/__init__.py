"""Outlook mail operations via AppleScript."""

from outlook_agent.mail.compose import OutgoingMessage
from outlook_agent.mail.messages import (
    FolderName,
    MailMessage,
    get_mail_folders,
    get_messages,
    get_unread_messages,
    search_messages,
)
from outlook_agent.mail.send import SendPipeline, SendResult, send_message

__all__ = [
    # Data classes
    "FolderName",
    "MailMessage",
    "OutgoingMessage",
    "SendResult",
    # Read operations
    "get_mail_folders",
    "get_messages",
    "get_unread_messages",
    "search_messages",
    # Write operations
    "SendPipeline",
    "send_message",
]
