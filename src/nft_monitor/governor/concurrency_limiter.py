# -*- coding: utf-8 -*-
"""Bounded concurrency with strict FIFO hand-off of freed slots."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, Optional

import structlog

from nft_monitor.governor.cancellation import raise_if_cancelled, wait_granted


class ConcurrencyLimiter:
    """Caps in-flight operations at max_concurrent.

    A slot freed by a finishing operation is handed directly to the oldest
    waiter, so new arrivals never overtake queued callers.
    """

    def __init__(
        self,
        max_concurrent: int,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_concurrent: Maximum number of operations running at once.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._max = max_concurrent
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def max_concurrent(self) -> int:
        return self._max

    @property
    def running(self) -> int:
        return self._running

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    async def run[T](
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> T:
        """Run fn inside a slot, waiting (FIFO) while the limiter is full.

        Raises:
            OperationCancelled: If cancel fires while waiting for a slot.
        """
        await self._acquire(cancel)
        try:
            return await fn()
        finally:
            self._release()

    async def _acquire(self, cancel: asyncio.Event | None) -> None:
        raise_if_cancelled(cancel)
        if self._running < self._max and not self._waiters:
            self._running += 1
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        self._logger.debug(
            "concurrency_limiter_wait",
            concurrency_running=self._running,
            concurrency_waiting=len(self._waiters),
        )
        try:
            await wait_granted(future, cancel)
        except BaseException:
            if future.done() and not future.cancelled():
                # Slot was handed over while we were giving up: pass it on.
                self._release()
            else:
                future.cancel()
                try:
                    self._waiters.remove(future)
                except ValueError:
                    pass
            raise

    def _release(self) -> None:
        """Hand the slot to the next live waiter, or free it."""
        while self._waiters:
            nxt = self._waiters.popleft()
            if nxt.done():
                continue
            # running count unchanged: the slot moves to the waiter
            nxt.set_result(None)
            return
        self._running -= 1
