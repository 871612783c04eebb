"""Cooperative cancellation signal observed at checkpoints."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from sdetkit.errors import OperationCancelled
from sdetkit.logging import get_logger

logger = get_logger(__name__)


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason = ""

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        logger.debug("Cancellation requested: %s", reason or "<no reason>")

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            message = "Operation cancelled"
            if self.reason:
                message = f"{message}: {self.reason}"
            raise OperationCancelled(message)

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(
        self,
        delay: float,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Suspend for ``delay`` seconds, aborting as soon as the token fires."""
        self.raise_if_cancelled()
        sleeper = asyncio.ensure_future(sleep(delay))
        watcher = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({sleeper, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (sleeper, watcher):
                if not pending.done():
                    pending.cancel()
        self.raise_if_cancelled()
        sleeper.result()
