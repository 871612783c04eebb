"""Run async checks over many items with a cap on in-flight work."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from sdetkit.errors import ConfigurationError
from sdetkit.logging import get_logger

TItem = TypeVar("TItem")
TResult = TypeVar("TResult")

logger = get_logger(__name__)


async def run_with_max_concurrency(
    items: Sequence[TItem],
    max_concurrency: int,
    worker: Callable[[TItem], Awaitable[TResult]],
    *,
    return_exceptions: bool = False,
) -> list[TResult | BaseException]:
    """Apply ``worker`` to every item, never running more than ``max_concurrency`` at once.

    Results are returned in input order. Unless ``return_exceptions`` is set,
    the first worker error cancels the remaining work and is re-raised.
    """
    if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int) or max_concurrency < 1:
        raise ConfigurationError(
            f"Invalid max_concurrency: {max_concurrency!r}",
            hint="Use an integer of 1 or more.",
        )
    if not items:
        return []

    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(index: int, item: TItem) -> TResult:
        async with semaphore:
            logger.debug("Running item %d/%d", index + 1, len(items))
            return await worker(item)

    tasks = [asyncio.ensure_future(bounded(index, item)) for index, item in enumerate(items)]
    try:
        return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
