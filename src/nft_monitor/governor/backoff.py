# -*- coding: utf-8 -*-
"""Bounded exponential backoff with jitter around a fallible async operation."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import Any, Optional

import structlog

from nft_monitor.exceptions import RETRYABLE_ERRORS, RateLimitedError
from nft_monitor.governor.cancellation import cancellable_sleep, raise_if_cancelled


class BackoffRetrier:
    """Retries an operation up to max_retries times after the first attempt.

    Delay before retry n (1-based) is min(min_delay * factor**(n-1), max_delay),
    scaled by uniform jitter in [0, 1) when jitter is enabled. Once retries are
    exhausted the last exception is re-raised as is.
    """

    def __init__(
        self,
        *,
        max_retries: int = 5,
        min_delay: float = 0.5,
        max_delay: float = 10.0,
        factor: float = 2.0,
        jitter: bool = True,
        rate_limited_min_delay: float | None = None,
        rng: Callable[[], float] = random.random,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the retrier.

        Args:
            max_retries: Retries after the first attempt (0 disables retrying).
            min_delay: Base delay in seconds.
            max_delay: Delay ceiling in seconds.
            factor: Exponential growth factor.
            jitter: Multiply each delay by a uniform sample in [0, 1).
            rate_limited_min_delay: Base delay used for RateLimitedError (None = min_delay).
            rng: Uniform [0, 1) sampler (injected for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError("delays must satisfy 0 <= min_delay <= max_delay")
        if factor < 1.0:
            raise ValueError("factor must be >= 1")
        self.max_retries = max_retries
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.factor = factor
        self.jitter = jitter
        self.rate_limited_min_delay = rate_limited_min_delay
        self._rng = rng
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def base_delay(self, attempt: int, *, min_delay: float | None = None) -> float:
        """Un-jittered delay before retry number attempt (1-based), capped at max_delay."""
        base = self.min_delay if min_delay is None else min_delay
        return min(base * (self.factor ** (attempt - 1)), self.max_delay)

    def compute_delay(self, attempt: int, error: BaseException | None = None) -> float:
        """Delay in seconds before retry number attempt, given the error that triggered it."""
        min_delay: float | None = None
        if isinstance(error, RateLimitedError):
            if error.retry_after is not None and error.retry_after > 0:
                return min(error.retry_after, self.max_delay)
            min_delay = self.rate_limited_min_delay
        delay = self.base_delay(attempt, min_delay=min_delay)
        if self.jitter:
            delay *= self._rng()
        return delay

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, RETRYABLE_ERRORS)

    async def run[T](
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> T:
        """Invoke fn, retrying retryable failures with backoff.

        Raises:
            OperationCancelled: If cancel fires before an attempt or during a backoff sleep.
            Exception: The last error from fn once retries are exhausted, or any
                non-retryable error immediately.
        """
        attempt = 0
        while True:
            raise_if_cancelled(cancel)
            try:
                return await fn()
            except Exception as e:
                attempt += 1
                if not self.is_retryable(e) or attempt > self.max_retries:
                    if attempt > 1:
                        self._logger.warning(
                            "backoff_gave_up",
                            backoff_attempts=attempt,
                            error_type=type(e).__name__,
                            error_message=str(e),
                        )
                    raise
                delay = self.compute_delay(attempt, e)
                self._logger.debug(
                    "backoff_retry",
                    backoff_attempt=attempt,
                    backoff_max_retries=self.max_retries,
                    backoff_delay_seconds=round(delay, 3),
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                await cancellable_sleep(delay, cancel)
