# -*- coding: utf-8 -*-
"""Token bucket enforcing a global ceiling on outbound requests.

Refill happens on a fixed cadence: every interval adds tokens_per_interval,
capped at capacity. Callers that cannot be served immediately wait in strict
FIFO order; the head waiter blocks later ones even if they would fit.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from nft_monitor.exceptions import CapacityExceededError
from nft_monitor.governor.cancellation import raise_if_cancelled, wait_granted


@dataclass(slots=True)
class _Waiter:
    count: int
    future: asyncio.Future[None]


class TokenBucket:
    """Rate limiter shared by every outbound call. Owns the token counter."""

    def __init__(
        self,
        *,
        capacity: int,
        tokens_per_interval: int,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize a full bucket.

        Args:
            capacity: Maximum number of tokens held.
            tokens_per_interval: Tokens added on each refill tick.
            interval_seconds: Refill cadence.
            clock: Monotonic clock (injected for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if tokens_per_interval < 1:
            raise ValueError("tokens_per_interval must be >= 1")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._capacity = capacity
        self._tokens = capacity
        self._tokens_per_interval = tokens_per_interval
        self._interval = interval_seconds
        self._clock = clock
        self._last_refill = clock()
        self._waiters: deque[_Waiter] = deque()
        self._refill_task: asyncio.Task[None] | None = None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def tokens(self) -> int:
        """Tokens currently available (after applying any elapsed refills)."""
        self._refill()
        return self._tokens

    @property
    def waiting(self) -> int:
        """Number of callers queued for tokens."""
        return len(self._waiters)

    async def acquire(self, count: int = 1, *, cancel: asyncio.Event | None = None) -> None:
        """Take count tokens, waiting in FIFO order if not enough are available.

        Raises:
            CapacityExceededError: If count exceeds capacity (never satisfiable).
            OperationCancelled: If cancel fires while waiting.
        """
        if count < 1:
            raise ValueError("count must be >= 1")
        if count > self._capacity:
            raise CapacityExceededError(count, self._capacity)
        raise_if_cancelled(cancel)

        self._refill()
        if not self._waiters and self._tokens >= count:
            self._tokens -= count
            return

        waiter = _Waiter(count=count, future=asyncio.get_running_loop().create_future())
        self._waiters.append(waiter)
        self._logger.debug(
            "token_bucket_wait",
            token_bucket_requested=count,
            token_bucket_available=self._tokens,
            token_bucket_waiting=len(self._waiters),
        )
        self._ensure_refill_task()
        try:
            await wait_granted(waiter.future, cancel)
        except BaseException:
            self._abandon(waiter)
            raise

    def _abandon(self, waiter: _Waiter) -> None:
        """Drop a waiter that gave up; hand back tokens if it was granted meanwhile."""
        if waiter.future.done() and not waiter.future.cancelled():
            self._tokens = min(self._capacity, self._tokens + waiter.count)
        else:
            waiter.future.cancel()
            try:
                self._waiters.remove(waiter)
            except ValueError:
                pass
        self._drain()

    def _refill(self) -> None:
        """Apply every refill tick that elapsed since the last one."""
        now = self._clock()
        elapsed_ticks = int((now - self._last_refill) // self._interval)
        if elapsed_ticks <= 0:
            return
        self._last_refill += elapsed_ticks * self._interval
        self._tokens = min(
            self._capacity,
            self._tokens + elapsed_ticks * self._tokens_per_interval,
        )

    def _drain(self) -> None:
        """Grant tokens to waiters in arrival order while the head can be served."""
        while self._waiters:
            head = self._waiters[0]
            if head.future.done():
                self._waiters.popleft()
                continue
            if self._tokens < head.count:
                break
            self._waiters.popleft()
            self._tokens -= head.count
            head.future.set_result(None)

    def _ensure_refill_task(self) -> None:
        if self._refill_task is None or self._refill_task.done():
            self._refill_task = asyncio.create_task(self._refill_loop())

    async def _refill_loop(self) -> None:
        """Wake on each refill boundary while anyone is waiting."""
        while self._waiters:
            next_tick = self._last_refill + self._interval
            await asyncio.sleep(max(0.0, next_tick - self._clock()))
            self._refill()
            self._drain()
        self._refill_task = None

    async def aclose(self) -> None:
        """Stop the refill task and fail any remaining waiters with cancellation."""
        task = self._refill_task
        self._refill_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        while self._waiters:
            self._waiters.popleft().future.cancel()
