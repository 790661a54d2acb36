"""Error classes for outlook-agent operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from outlook_agent.strategy import AttemptOutcome


class OutlookError(Exception):
    """Base class for every error raised by outlook-agent."""


class AccessError(OutlookError):
    """Raised when the target application is missing or cannot be started."""

    def __init__(self, message: str, app_name: str = "Microsoft Outlook") -> None:
        super().__init__(message)
        self.app_name = app_name


class ValidationError(OutlookError):
    """Raised when a request is rejected before any automation call."""


class AttachmentAccessError(ValidationError, AccessError):
    """Raised when an attachment path does not exist or cannot be read."""

    def __init__(self, message: str) -> None:
        ValidationError.__init__(self, message)
        self.app_name = "filesystem"


class AutomationError(OutlookError):
    """Raised when an AppleScript command fails or reports an error."""

    def __init__(
        self,
        message: str,
        script: str | None = None,
        attempts: list[AttemptOutcome] | None = None,
    ) -> None:
        super().__init__(message)
        self.script = script
        self.attempts = attempts or []


class ParseError(OutlookError):
    """Raised when a single record block cannot be decoded into an entity."""


class AutomationTimeoutError(AutomationError):
    """Raised when an AppleScript command times out.

    The command may still have run to completion inside the target
    application, so the outcome is unknown rather than failed.
    """
