# -*- coding: utf-8 -*-
"""Single entry point for outbound calls: rate limit, then concurrency slot, then retries."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import structlog

from nft_monitor.governor.backoff import BackoffRetrier
from nft_monitor.governor.concurrency_limiter import ConcurrencyLimiter
from nft_monitor.governor.token_bucket import TokenBucket

if TYPE_CHECKING:
    from nft_monitor.config import Settings


@dataclass(frozen=True)
class GovernorStats:
    """Point-in-time view of the governor counters."""

    tokens_available: int
    token_waiters: int
    running: int
    slot_waiters: int


class RequestGovernor:
    """Performs an operation respecting the global rate, concurrency and retry policy.

    Order is token -> slot -> retried operation, so a caller waiting on tokens
    never holds a concurrency slot.
    """

    def __init__(
        self,
        token_bucket: TokenBucket,
        concurrency_limiter: ConcurrencyLimiter,
        retrier: BackoffRetrier,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._bucket = token_bucket
        self._limiter = concurrency_limiter
        self._retrier = retrier
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @classmethod
    def from_settings(cls, settings: Settings) -> RequestGovernor:
        """Build the governor and its parts from settings.governor (milliseconds → seconds)."""
        cfg = settings.governor
        rate_limited_min_delay = (
            cfg.rate_limited_min_delay_ms / 1000.0
            if cfg.rate_limited_min_delay_ms is not None
            else None
        )
        return cls(
            token_bucket=TokenBucket(
                capacity=cfg.bucket_capacity,
                tokens_per_interval=cfg.tokens_per_interval,
                interval_seconds=cfg.interval_ms / 1000.0,
            ),
            concurrency_limiter=ConcurrencyLimiter(cfg.max_concurrent),
            retrier=BackoffRetrier(
                max_retries=cfg.max_retries,
                min_delay=cfg.min_delay_ms / 1000.0,
                max_delay=cfg.max_delay_ms / 1000.0,
                factor=cfg.backoff_factor,
                jitter=cfg.jitter,
                rate_limited_min_delay=rate_limited_min_delay,
            ),
        )

    @property
    def token_bucket(self) -> TokenBucket:
        return self._bucket

    @property
    def concurrency_limiter(self) -> ConcurrencyLimiter:
        return self._limiter

    @property
    def retrier(self) -> BackoffRetrier:
        return self._retrier

    async def execute[T](
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        cancel: asyncio.Event | None = None,
        tokens: int = 1,
    ) -> T:
        """Run operation under the governor.

        Args:
            operation: Zero-argument callable returning an awaitable (one outbound call).
            cancel: Shared cancellation signal; aborts token/slot waits and backoff sleeps.
            tokens: Tokens consumed by this call.

        Raises:
            CapacityExceededError: tokens exceeds the bucket capacity.
            OperationCancelled: cancel fired while waiting.
            Exception: The operation's own error once retries are exhausted.
        """
        await self._bucket.acquire(tokens, cancel=cancel)
        return await self._limiter.run(
            lambda: self._retrier.run(operation, cancel=cancel),
            cancel=cancel,
        )

    def stats(self) -> GovernorStats:
        return GovernorStats(
            tokens_available=self._bucket.tokens,
            token_waiters=self._bucket.waiting,
            running=self._limiter.running,
            slot_waiters=self._limiter.waiting,
        )

    async def aclose(self) -> None:
        """Stop background refill work."""
        await self._bucket.aclose()
        self._logger.debug("request_governor_closed")
