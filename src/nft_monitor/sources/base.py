"""Snapshot source protocol: supplies the current remote state of one (target, chain)."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from nft_monitor.models.snapshot import Snapshot
from nft_monitor.models.target import Target


@runtime_checkable
class SnapshotSource(Protocol):
    """Fetches a snapshot for a target on one chain.

    Implementations must be idempotent. Every outbound request they make goes
    through the RequestGovernor on its own, so a fetch spanning several pages
    or endpoints is charged per request.
    """

    async def fetch_snapshot(
        self,
        target: Target,
        chain: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Snapshot:
        """Return the current snapshot.

        Raises:
            NetworkError / RateLimitedError: a request still failing after its retries.
            ProviderDataError: missing, malformed or incomplete data (the poll is skipped).
            OperationCancelled: cancel fired while a request was waiting.
        """
        ...
