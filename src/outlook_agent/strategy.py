"""Ordered fallback execution for actions Outlook supports in several ways.

A chain tries each strategy in turn and stops at the first one that
succeeds. Strategies build their script from scratch on every attempt, so
nothing queued by a failed attempt leaks into the next one.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from outlook_agent.applescript.runner import AutomationRunner
from outlook_agent.errors import AutomationError, AutomationTimeoutError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of running one strategy."""

    strategy: str
    success: bool
    message: str

    def __str__(self) -> str:
        status = "ok" if self.success else "failed"
        return f"{self.strategy} ({status}): {self.message}"


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """One way of performing an action.

    build: returns the complete AppleScript for this attempt.
    interpret: turns the raw result text into the action's value.
    """

    name: str
    build: Callable[[], str]
    interpret: Callable[[str], T]


@dataclass
class ChainResult(Generic[T]):
    """Value produced by the winning strategy plus every attempt made."""

    value: T
    attempts: list[AttemptOutcome]

    @property
    def strategy(self) -> str:
        return self.attempts[-1].strategy


class StrategyChain(Generic[T]):
    """Runs strategies in order until one succeeds.

    With stop_on_timeout, a timed-out attempt ends the chain instead of
    falling through, for actions that must not happen twice.
    """

    def __init__(
        self,
        runner: AutomationRunner,
        strategies: Sequence[Strategy[T]],
        *,
        action: str,
        stop_on_timeout: bool = False,
        log: logging.Logger | None = None,
    ) -> None:
        if not strategies:
            raise ValueError(f"No strategies configured for {action}")
        self.runner = runner
        self.strategies = list(strategies)
        self.action = action
        self.stop_on_timeout = stop_on_timeout
        self.log = log or logger

    def run(self) -> ChainResult[T]:
        """
        Execute strategies until one succeeds.

        Returns:
            The winning strategy's value and the ordered attempt log.

        Raises:
            AutomationTimeoutError: If an attempt timed out and stop_on_timeout
                is set. The attempt may have completed in the target.
            AutomationError: If every strategy failed. The message lists each
                strategy's error and ``attempts`` holds the outcomes.
        """
        attempts: list[AttemptOutcome] = []

        for strategy in self.strategies:
            self.log.info("%s: trying %s", self.action, strategy.name)
            try:
                raw = self.runner.execute(strategy.build())
                value = strategy.interpret(raw)
            except AutomationError as e:
                attempts.append(AttemptOutcome(strategy.name, False, str(e)))
                if self.stop_on_timeout and isinstance(e, AutomationTimeoutError):
                    self.log.error(
                        "%s: %s timed out, not trying further strategies", self.action, strategy.name
                    )
                    raise AutomationTimeoutError(
                        f"Could not confirm {self.action}: {strategy.name} timed out and "
                        f"may already have taken effect, so no other strategy was tried. {e}",
                        script=e.script,
                        attempts=attempts,
                    ) from e
                self.log.warning("%s: %s failed: %s", self.action, strategy.name, e)
                continue

            attempts.append(AttemptOutcome(strategy.name, True, raw))
            self.log.info("%s: %s succeeded", self.action, strategy.name)
            return ChainResult(value=value, attempts=attempts)

        details = "; ".join(f"{a.strategy}: {a.message}" for a in attempts)
        self.log.error("%s: all %d strategies failed", self.action, len(attempts))
        raise AutomationError(
            f"Could not {self.action}. All strategies failed: {details}",
            attempts=attempts,
        )
