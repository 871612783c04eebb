"""Deadline race for a single unit of async work."""

from __future__ import annotations

import asyncio
import inspect
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from sdetkit.errors import ConfigurationError
from sdetkit.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)

Work = Union[Callable[[], Awaitable[T]], Awaitable[T]]


@dataclass(frozen=True)
class TimeoutResult(Generic[T]):
    completed: bool
    value: T | None = None
    elapsed_seconds: float = 0.0


def _discard_late_result(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Discarding late failure after timeout: %r", exc)


def _validate_timeout(timeout_seconds: float) -> None:
    if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)):
        raise ConfigurationError(
            f"timeout_seconds must be a number, got {timeout_seconds!r}",
            hint="Use a positive duration in seconds.",
        )
    if math.isnan(timeout_seconds) or timeout_seconds <= 0:
        raise ConfigurationError(
            f"Invalid timeout: {timeout_seconds}",
            hint="Use a positive duration in seconds.",
        )


async def run_with_timeout(
    work: Work[T],
    timeout_seconds: float,
    *,
    cancel_on_timeout: bool = False,
) -> TimeoutResult[T]:
    """Race ``work`` against a deadline of ``timeout_seconds``.

    Returns a completed :class:`TimeoutResult` when the work resolves before the
    deadline and raises :class:`TimeoutError` otherwise. Errors raised by the
    work itself propagate unchanged. When both sides are ready together the
    work's outcome wins. The work keeps running after a timeout unless
    ``cancel_on_timeout`` is set; its late result is discarded.
    """
    try:
        _validate_timeout(timeout_seconds)
    except ConfigurationError:
        if inspect.iscoroutine(work):
            work.close()
        raise

    awaitable = work() if callable(work) else work
    loop = asyncio.get_running_loop()
    started = loop.time()
    task = asyncio.ensure_future(awaitable)
    timer = asyncio.ensure_future(asyncio.sleep(timeout_seconds))
    try:
        await asyncio.wait({task, timer}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.add_done_callback(_discard_late_result)
        raise
    finally:
        timer.cancel()

    if task.done():
        value = task.result()
        return TimeoutResult(completed=True, value=value, elapsed_seconds=loop.time() - started)

    logger.warning("Work did not finish within %.3fs", timeout_seconds)
    if cancel_on_timeout:
        task.cancel()
    task.add_done_callback(_discard_late_result)
    raise TimeoutError(f"Timed out after {timeout_seconds}s")
