# -*- coding: utf-8 -*-
"""Outbound request governor: token bucket, concurrency limiter and backoff retrier."""

from nft_monitor.governor.backoff import BackoffRetrier
from nft_monitor.governor.cancellation import cancellable_sleep, raise_if_cancelled
from nft_monitor.governor.concurrency_limiter import ConcurrencyLimiter
from nft_monitor.governor.request_governor import GovernorStats, RequestGovernor
from nft_monitor.governor.token_bucket import TokenBucket

__all__ = [
    "BackoffRetrier",
    "ConcurrencyLimiter",
    "GovernorStats",
    "RequestGovernor",
    "TokenBucket",
    "cancellable_sleep",
    "raise_if_cancelled",
]
