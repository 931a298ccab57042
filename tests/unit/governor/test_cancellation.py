# -*- coding: utf-8 -*-
"""Unit tests for cancellable waits."""

from __future__ import annotations

import asyncio

import pytest

from nft_monitor.exceptions import OperationCancelled
from nft_monitor.governor.cancellation import cancellable_sleep, wait_granted


async def test_cancellable_sleep_returns_after_delay() -> None:
    await asyncio.wait_for(cancellable_sleep(0.01, asyncio.Event()), timeout=1)


async def test_cancellable_sleep_raises_when_signal_fires() -> None:
    cancel = asyncio.Event()
    asyncio.get_running_loop().call_later(0.01, cancel.set)

    with pytest.raises(OperationCancelled):
        await asyncio.wait_for(cancellable_sleep(30, cancel), timeout=1)


async def test_wait_granted_treats_cancelled_future_as_discarded() -> None:
    future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
    future.cancel()

    with pytest.raises(OperationCancelled):
        await wait_granted(future)
