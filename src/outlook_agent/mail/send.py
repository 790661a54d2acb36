"""Sending messages through Outlook with ordered fallbacks.

Outlook has no transaction primitive, so sending is best effort:

1. compose_attach - build an outgoing message with recipient objects and send it.
2. draft_window - fill a draft window's message and send it.
3. visible_draft - open a visible draft for the user to finish by hand.

The first strategy that succeeds ends the attempt. A later strategy never
runs after a success, so a confirmed send is not repeated. A timed-out
attempt also ends it: Outlook may have sent the message before osascript
was stopped.
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass

from outlook_agent.applescript import AutomationRunner
from outlook_agent.attachments import PathGuard
from outlook_agent.errors import ValidationError
from outlook_agent.mail.compose import (
    OutgoingMessage,
    build_compose_attach_script,
    build_draft_window_script,
    build_visible_draft_script,
)
from outlook_agent.strategy import AttemptOutcome, Strategy, StrategyChain

COMPOSE_ATTACH = "compose_attach"
DRAFT_WINDOW = "draft_window"
VISIBLE_DRAFT = "visible_draft"

DRAFT_CONFIRMATION = (
    "A draft has been created in Outlook with the content and attachments. "
    "Please review and send it manually."
)

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """Outcome of a send call."""

    confirmation: str
    attempts: list[AttemptOutcome]

    @property
    def strategy(self) -> str:
        return self.attempts[-1].strategy

    @property
    def delivered(self) -> bool:
        """False when only a draft was left for manual completion."""
        return self.strategy != VISIBLE_DRAFT

    def __str__(self) -> str:
        return self.confirmation


def default_strategies(message: OutgoingMessage) -> list[Strategy[str]]:
    """The three send strategies in the order they are tried."""
    return [
        Strategy(
            COMPOSE_ATTACH,
            lambda: build_compose_attach_script(message),
            lambda raw: raw or "Email sent successfully",
        ),
        Strategy(
            DRAFT_WINDOW,
            lambda: build_draft_window_script(message),
            lambda raw: raw or "Email sent successfully",
        ),
        Strategy(
            VISIBLE_DRAFT,
            lambda: build_visible_draft_script(message),
            lambda raw: DRAFT_CONFIRMATION,
        ),
    ]


class SendPipeline:
    """Drives the send strategies for one message."""

    def __init__(
        self,
        runner: AutomationRunner,
        *,
        log: logging.Logger | None = None,
    ) -> None:
        self.runner = runner
        self.log = log or logger

    def send(
        self,
        message: OutgoingMessage,
        strategies: Sequence[Strategy[str]] | None = None,
    ) -> SendResult:
        """
        Try each strategy until one succeeds.

        Raises:
            AutomationTimeoutError: If an attempt timed out. The message may
                already have been sent, so no further strategy runs.
            AutomationError: If all strategies fail; the message names each
                strategy with its error.
        """
        chain = StrategyChain(
            self.runner,
            strategies or default_strategies(message),
            action="send or create email",
            stop_on_timeout=True,
            log=self.log,
        )
        result = chain.run()
        return SendResult(confirmation=result.value, attempts=result.attempts)


def send_message(
    to: str,
    subject: str,
    body: str,
    *,
    cc: str | None = None,
    bcc: str | None = None,
    is_html: bool = False,
    attachments: Sequence[str | os.PathLike[str]] | None = None,
    guard: PathGuard | None = None,
    runner: AutomationRunner | None = None,
) -> SendResult:
    """
    Send a message, falling back to a visible draft if sending fails.

    Attachments are validated before Outlook is contacted at all.

    Args:
        to: Recipient address.
        subject: Message subject.
        body: Message body, plain text or HTML.
        cc: Optional CC address.
        bcc: Optional BCC address.
        is_html: Whether body is HTML.
        attachments: File paths to attach.
        guard: PathGuard to validate attachments (default: cwd, 10 MiB).
        runner: Runner to use (default: a new AutomationRunner).

    Returns:
        SendResult with the confirmation text and every attempt made.

    Raises:
        ValidationError: If a required field is missing or an attachment is rejected.
        AccessError: If Outlook cannot be reached.
        AutomationTimeoutError: If sending timed out; the message may have been sent.
        AutomationError: If every strategy failed.

    Example:
        >>> result = send_message(
        ...     "alex@example.com",
        ...     "Project Update",
        ...     "The report is attached.",
        ...     attachments=["reports/q3.pdf"],
        ... )
    """
    if not to or not subject or not body:
        raise ValidationError(
            "Recipient (to), subject, and body are required for send operation"
        )

    guard = guard or PathGuard()
    refs = guard.validate(attachments)

    message = OutgoingMessage(
        to=to,
        subject=subject,
        body=body,
        cc=cc,
        bcc=bcc,
        is_html=is_html,
        attachments=tuple(refs),
    )
    logger.info("Sending email to %s, subject %r, %d attachment(s)", to, subject, len(refs))

    runner = runner or AutomationRunner()
    runner.ensure_ready()
    return SendPipeline(runner).send(message)
