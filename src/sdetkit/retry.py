"""Retry/backoff helpers for outcome-producing async work."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from sdetkit.cancellation import CancellationToken
from sdetkit.errors import ConfigurationError, OperationCancelled
from sdetkit.logging import get_logger
from sdetkit.models import AttemptRecord, Outcome

logger = get_logger(__name__)

Backoff = Callable[[int], float]
TransientPredicate = Callable[[Outcome], bool]
Sleep = Callable[[float], Awaitable[None]]


def constant_backoff(seconds: float) -> Backoff:
    return lambda attempt: seconds


def linear_backoff(step_seconds: float) -> Backoff:
    return lambda attempt: step_seconds * attempt


def exponential_backoff(
    initial_seconds: float = 0.5,
    multiplier: float = 2.0,
    max_delay: float | None = None,
) -> Backoff:
    def schedule(attempt: int) -> float:
        delay = initial_seconds * (multiplier ** (attempt - 1))
        if max_delay is not None:
            delay = min(delay, max_delay)
        return delay

    return schedule


def transient_reasons(*reasons: str) -> TransientPredicate:
    accepted = frozenset(reasons)
    return lambda outcome: outcome.is_fail and outcome.reason in accepted


def _always_transient(outcome: Outcome) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    is_transient: TransientPredicate = _always_transient
    backoff: Backoff = field(default_factory=exponential_backoff)

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ConfigurationError(
                f"max_attempts must be an integer, got {self.max_attempts!r}",
                hint="Use a value of 1 or more.",
            )
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"Invalid max_attempts: {self.max_attempts}",
                hint="Use a value of 1 or more.",
            )

    def delay_for(self, attempt: int) -> float:
        return max(0.0, float(self.backoff(attempt)))


@dataclass(frozen=True)
class RetryReport:
    outcome: Outcome
    attempts: tuple[AttemptRecord, ...]
    exhausted: bool = False

    @property
    def invocations(self) -> int:
        return len(self.attempts)


async def run_with_retry_report(
    operation: Callable[[], Awaitable[Outcome]],
    *,
    policy: RetryPolicy,
    cancel_token: CancellationToken | None = None,
    sleep: Sleep = asyncio.sleep,
) -> RetryReport:
    """Run ``operation`` until it passes, fails for good, or attempts run out.

    Attempts are strictly sequential. Cancellation is observed before every
    attempt and during each backoff wait; an attempt already in flight is
    never interrupted. Errors raised by ``operation`` propagate unchanged.
    """
    records: list[AttemptRecord] = []
    attempt = 1
    delay = 0.0

    while True:
        if cancel_token is not None:
            try:
                cancel_token.raise_if_cancelled()
            except OperationCancelled:
                logger.warning("Retry cancelled before attempt %d", attempt)
                raise

        outcome = await operation()
        if not isinstance(outcome, Outcome):
            raise TypeError(f"Retry operation must return Outcome, got {type(outcome).__name__}")
        records.append(AttemptRecord(attempt=attempt, outcome=outcome, delay_before=delay))
        logger.debug("Attempt %d/%d finished: %s", attempt, policy.max_attempts, outcome)

        if outcome.is_pass:
            return RetryReport(outcome=outcome, attempts=tuple(records))
        if attempt >= policy.max_attempts:
            logger.warning("Retry exhausted after %d attempts: %s", attempt, outcome)
            return RetryReport(outcome=outcome, attempts=tuple(records), exhausted=True)
        if not policy.is_transient(outcome):
            logger.debug("Attempt %d failed with non-transient outcome: %s", attempt, outcome)
            return RetryReport(outcome=outcome, attempts=tuple(records))

        delay = policy.delay_for(attempt)
        logger.info("Retrying after %s in %.3fs (attempt %d)", outcome, delay, attempt + 1)
        if delay > 0:
            if cancel_token is None:
                await sleep(delay)
            else:
                try:
                    await cancel_token.sleep(delay, sleep=sleep)
                except OperationCancelled:
                    logger.warning("Retry cancelled during backoff before attempt %d", attempt + 1)
                    raise
        attempt += 1


async def run_with_retry(
    operation: Callable[[], Awaitable[Outcome]],
    *,
    policy: RetryPolicy,
    cancel_token: CancellationToken | None = None,
    sleep: Sleep = asyncio.sleep,
) -> Outcome:
    report = await run_with_retry_report(
        operation,
        policy=policy,
        cancel_token=cancel_token,
        sleep=sleep,
    )
    return report.outcome
