"""AppleScript builders for composing outgoing Outlook messages.

Outlook exposes two object models for a new message: an ``outgoing
message`` created directly, and the message inside a ``draft window``.
Each builder here produces one complete script for one send strategy.
"""

from dataclasses import dataclass, field

from outlook_agent.applescript import escape_applescript_string
from outlook_agent.attachments import AttachmentRef
from outlook_agent.errors import ValidationError

# Best-effort wait for Outlook to finish importing attachments before send
ATTACH_SETTLE_SECONDS = 1


@dataclass(frozen=True)
class OutgoingMessage:
    """A validated message ready to be turned into a send script."""

    to: str
    subject: str
    body: str
    cc: str | None = None
    bcc: str | None = None
    is_html: bool = False
    attachments: tuple[AttachmentRef, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for ref in self.attachments:
            if not ref.allowed:
                raise ValidationError(
                    f"Attachment {ref.requested!r} was rejected: {ref.reason or 'not allowed'}"
                )


def display_name_from_address(address: str) -> str:
    """Guess a display name from the local part of an address.

    ``alex.smith@example.com`` becomes ``Alex Smith``.
    """
    local_part = address.split("@")[0]
    return " ".join(part[:1].upper() + part[1:] for part in local_part.split("."))


def _content_lines(var: str, message: OutgoingMessage) -> str:
    body_escaped = escape_applescript_string(message.body)
    if message.is_html:
        return f'''
            set content type of {var} to HTML
            set content of {var} to "{body_escaped}"'''
    return f'''
            set content of {var} to "{body_escaped}"'''


def _attachment_lines(var: str, attachments: tuple[AttachmentRef, ...]) -> str:
    lines = []
    for ref in attachments:
        if not ref.allowed:
            raise ValidationError(f"Attachment {ref.requested!r} was rejected")
        path_escaped = escape_applescript_string(ref.resolved)
        lines.append(f'''
            try
                set attachmentFile to POSIX file "{path_escaped}"
                make new attachment at {var} with properties {{file:attachmentFile}}
                log "Attached file: {path_escaped}"
            on error attachErrMsg
                log "Failed to attach file: {path_escaped} - " & attachErrMsg
            end try''')
    return "".join(lines)


def _recipient_record(kind: str, address: str) -> str:
    address_escaped = escape_applescript_string(address)
    name_escaped = escape_applescript_string(display_name_from_address(address))
    return (
        f"make new {kind} recipient with properties "
        f'{{email address:{{name:"{name_escaped}", address:"{address_escaped}"}}}}'
    )


def _recipient_lists(var: str, message: OutgoingMessage) -> str:
    lines = [f'set to recipients of {var} to {{"{escape_applescript_string(message.to)}"}}']
    if message.cc:
        lines.append(f'set cc recipients of {var} to {{"{escape_applescript_string(message.cc)}"}}')
    if message.bcc:
        lines.append(f'set bcc recipients of {var} to {{"{escape_applescript_string(message.bcc)}"}}')
    return "\n            ".join(lines)


def build_compose_attach_script(message: OutgoingMessage) -> str:
    """Create an outgoing message with recipient objects and attachments, then send."""
    subject_escaped = escape_applescript_string(message.subject)

    recipients = [_recipient_record("to", message.to)]
    if message.cc:
        recipients.append(_recipient_record("cc", message.cc))
    if message.bcc:
        recipients.append(_recipient_record("bcc", message.bcc))
    recipient_lines = "\n                ".join(recipients)

    return f'''
    tell application "Microsoft Outlook"
        try
            set msg to make new outgoing message with properties {{subject:"{subject_escaped}"}}
            {_content_lines("msg", message)}
            tell msg
                {recipient_lines}
            end tell
            {_attachment_lines("msg", message.attachments)}
            delay {ATTACH_SETTLE_SECONDS}
            send msg
            return "Email sent successfully"
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def build_draft_window_script(message: OutgoingMessage) -> str:
    """Fill the message of a new draft window, then send."""
    subject_escaped = escape_applescript_string(message.subject)
    return f'''
    tell application "Microsoft Outlook"
        try
            set newDraft to make new draft window
            set theMessage to item 1 of mail items of newDraft
            set subject of theMessage to "{subject_escaped}"
            {_content_lines("theMessage", message)}
            {_recipient_lists("theMessage", message)}
            {_attachment_lines("theMessage", message.attachments)}
            delay {ATTACH_SETTLE_SECONDS}
            send theMessage
            return "Email sent successfully using a draft window"
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''


def build_visible_draft_script(message: OutgoingMessage) -> str:
    """Open a visible draft for the user to review and send manually."""
    subject_escaped = escape_applescript_string(message.subject)
    return f'''
    tell application "Microsoft Outlook"
        try
            set newMessage to make new outgoing message with properties {{subject:"{subject_escaped}", visible:true}}
            {_content_lines("newMessage", message)}
            {_recipient_lists("newMessage", message)}
            {_attachment_lines("newMessage", message.attachments)}
            activate
            return "Draft created"
        on error errMsg
            return "Error: " & errMsg
        end try
    end tell
    '''
