# -*- coding: utf-8 -*-
"""Cancellable waits driven by a shared asyncio.Event (the shutdown / cancellation signal)."""

from __future__ import annotations

import asyncio
from typing import Any

from nft_monitor.exceptions import OperationCancelled


def raise_if_cancelled(cancel: asyncio.Event | None) -> None:
    """Raise OperationCancelled if the signal has already fired."""
    if cancel is not None and cancel.is_set():
        raise OperationCancelled()


async def cancellable_sleep(delay: float, cancel: asyncio.Event | None = None) -> None:
    """Sleep for delay seconds, aborting immediately when cancel is set.

    Raises:
        OperationCancelled: If the signal fires before or during the sleep.
    """
    raise_if_cancelled(cancel)
    if cancel is None:
        await asyncio.sleep(max(0.0, delay))
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=max(0.0, delay))
    except TimeoutError:
        return
    raise OperationCancelled()


async def wait_granted(future: asyncio.Future[Any], cancel: asyncio.Event | None = None) -> None:
    """Wait until a waiter future is resolved, or raise OperationCancelled when cancel fires.

    The future itself is left untouched; callers inspect it to release whatever
    was granted concurrently with the cancellation.
    """
    raise_if_cancelled(cancel)
    if cancel is None:
        await asyncio.wait({future})
    else:
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({future, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
    if future.cancelled():
        raise OperationCancelled("Waiter discarded")
    if future.done():
        return
    raise OperationCancelled()
