# -*- coding: utf-8 -*-
"""Unit tests for RequestGovernor composition."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from nft_monitor.exceptions import CapacityExceededError, NetworkError
from nft_monitor.governor import (
    BackoffRetrier,
    ConcurrencyLimiter,
    RequestGovernor,
    TokenBucket,
)


def _governor(*, capacity: int = 10, max_concurrent: int = 2, max_retries: int = 2) -> RequestGovernor:
    return RequestGovernor(
        TokenBucket(capacity=capacity, tokens_per_interval=capacity, interval_seconds=60),
        ConcurrencyLimiter(max_concurrent),
        BackoffRetrier(max_retries=max_retries, rng=lambda: 0.0),
    )


async def test_execute_consumes_one_token_per_call_and_returns_result() -> None:
    governor = _governor()
    op = AsyncMock(return_value={"count": 1})

    result = await governor.execute(op)

    assert result == {"count": 1}
    op.assert_awaited_once()
    assert governor.stats().tokens_available == 9
    await governor.aclose()


async def test_retries_happen_inside_one_token() -> None:
    governor = _governor(max_retries=3)
    op = AsyncMock(side_effect=[NetworkError("a"), NetworkError("b"), "ok"])

    assert await governor.execute(op) == "ok"

    assert op.await_count == 3
    assert governor.stats().tokens_available == 9
    await governor.aclose()


async def test_capacity_exceeded_is_not_retried_and_operation_never_runs() -> None:
    governor = _governor(capacity=2)
    op = AsyncMock()

    with pytest.raises(CapacityExceededError):
        await governor.execute(op, tokens=3)

    op.assert_not_awaited()
    await governor.aclose()


async def test_concurrency_is_bounded_across_callers() -> None:
    governor = _governor(max_concurrent=2)
    peak = 0

    async def op() -> None:
        nonlocal peak
        peak = max(peak, governor.stats().running)
        await asyncio.sleep(0.01)

    await asyncio.gather(*(governor.execute(op) for _ in range(6)))

    assert peak == 2
    assert governor.stats().running == 0
    await governor.aclose()


def test_from_settings_converts_milliseconds() -> None:
    settings = SimpleNamespace(
        governor=SimpleNamespace(
            tokens_per_interval=30,
            interval_ms=60_000,
            bucket_capacity=40,
            max_concurrent=4,
            max_retries=3,
            min_delay_ms=250,
            max_delay_ms=8_000,
            backoff_factor=3.0,
            jitter=False,
            rate_limited_min_delay_ms=1_000,
        )
    )

    governor = RequestGovernor.from_settings(cast(Any, settings))

    assert governor.token_bucket.capacity == 40
    assert governor.concurrency_limiter.max_concurrent == 4
    assert governor.retrier.max_retries == 3
    assert governor.retrier.min_delay == 0.25
    assert governor.retrier.max_delay == 8.0
    assert governor.retrier.rate_limited_min_delay == 1.0
