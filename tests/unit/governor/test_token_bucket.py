# -*- coding: utf-8 -*-
"""Unit tests for TokenBucket."""

from __future__ import annotations

import asyncio

import pytest

from nft_monitor.exceptions import CapacityExceededError, OperationCancelled
from nft_monitor.governor.token_bucket import TokenBucket


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def test_bucket_starts_full_and_acquire_decrements() -> None:
    bucket = TokenBucket(capacity=5, tokens_per_interval=5, interval_seconds=60)

    await bucket.acquire()
    await bucket.acquire(2)

    assert bucket.tokens == 2


async def test_acquire_more_than_capacity_fails_immediately() -> None:
    bucket = TokenBucket(capacity=3, tokens_per_interval=3, interval_seconds=60)

    with pytest.raises(CapacityExceededError) as exc_info:
        await bucket.acquire(4)

    assert exc_info.value.requested == 4
    assert exc_info.value.capacity == 3
    assert bucket.tokens == 3


async def test_acquire_rejects_non_positive_count() -> None:
    bucket = TokenBucket(capacity=3, tokens_per_interval=3, interval_seconds=60)

    with pytest.raises(ValueError):
        await bucket.acquire(0)


def test_refill_is_capped_at_capacity() -> None:
    clock = FakeClock()
    bucket = TokenBucket(capacity=4, tokens_per_interval=3, interval_seconds=1.0, clock=clock)
    bucket._tokens = 0

    clock.now = 1.5
    assert bucket.tokens == 3

    clock.now = 100.0
    assert bucket.tokens == 4


def test_refill_only_counts_whole_intervals() -> None:
    clock = FakeClock()
    bucket = TokenBucket(capacity=10, tokens_per_interval=2, interval_seconds=1.0, clock=clock)
    bucket._tokens = 0

    clock.now = 0.99
    assert bucket.tokens == 0
    clock.now = 2.0
    assert bucket.tokens == 4


async def test_waiters_are_served_in_arrival_order_head_blocks_smaller_requests() -> None:
    bucket = TokenBucket(capacity=2, tokens_per_interval=1, interval_seconds=0.05)
    await bucket.acquire(2)
    order: list[str] = []

    async def take(name: str, count: int) -> None:
        await bucket.acquire(count)
        order.append(name)

    first = asyncio.create_task(take("first", 2))
    await asyncio.sleep(0)
    second = asyncio.create_task(take("second", 1))
    await asyncio.sleep(0)
    assert bucket.waiting == 2

    await asyncio.wait_for(asyncio.gather(first, second), timeout=2)

    assert order == ["first", "second"]
    await bucket.aclose()


async def test_cancel_while_waiting_removes_waiter() -> None:
    bucket = TokenBucket(capacity=1, tokens_per_interval=1, interval_seconds=30)
    await bucket.acquire()
    cancel = asyncio.Event()

    task = asyncio.create_task(bucket.acquire(cancel=cancel))
    await asyncio.sleep(0)
    assert bucket.waiting == 1
    cancel.set()

    with pytest.raises(OperationCancelled):
        await asyncio.wait_for(task, timeout=1)
    assert bucket.waiting == 0
    await bucket.aclose()


async def test_acquire_with_cancel_already_set_raises() -> None:
    bucket = TokenBucket(capacity=1, tokens_per_interval=1, interval_seconds=30)
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(OperationCancelled):
        await bucket.acquire(cancel=cancel)
    assert bucket.tokens == 1


async def test_aclose_fails_pending_waiters() -> None:
    bucket = TokenBucket(capacity=1, tokens_per_interval=1, interval_seconds=30)
    await bucket.acquire()
    task = asyncio.create_task(bucket.acquire())
    await asyncio.sleep(0)

    await bucket.aclose()

    with pytest.raises(OperationCancelled):
        await asyncio.wait_for(task, timeout=1)


async def test_tokens_granted_to_a_cancelled_waiter_go_to_the_next_one() -> None:
    bucket = TokenBucket(capacity=2, tokens_per_interval=1, interval_seconds=30)
    await bucket.acquire(2)
    first = asyncio.create_task(bucket.acquire(2))
    await asyncio.sleep(0)
    second = asyncio.create_task(bucket.acquire(1))
    await asyncio.sleep(0)
    assert bucket.waiting == 2

    # grant the head, then cancel it before it resumes
    bucket._tokens = 2
    bucket._drain()
    assert bucket._tokens == 0
    first.cancel()

    await asyncio.wait_for(second, timeout=1)
    with pytest.raises(asyncio.CancelledError):
        await first
    assert bucket.tokens == 1
    assert bucket.waiting == 0
    await bucket.aclose()


async def test_cancelled_head_no_longer_blocks_smaller_waiters() -> None:
    bucket = TokenBucket(capacity=2, tokens_per_interval=1, interval_seconds=30)
    await bucket.acquire(2)
    cancel = asyncio.Event()
    head = asyncio.create_task(bucket.acquire(2, cancel=cancel))
    await asyncio.sleep(0)
    behind = asyncio.create_task(bucket.acquire(1))
    await asyncio.sleep(0)
    bucket._tokens = 1

    cancel.set()

    with pytest.raises(OperationCancelled):
        await asyncio.wait_for(head, timeout=1)
    await asyncio.wait_for(behind, timeout=1)
    assert bucket.tokens == 0
    assert bucket.waiting == 0
    await bucket.aclose()
