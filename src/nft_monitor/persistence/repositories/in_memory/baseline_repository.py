# -*- coding: utf-8 -*-
"""In-memory baseline repository (keyed by target_id, chain). Lost on restart: targets re-prime."""

from __future__ import annotations

from typing import Optional

from nft_monitor.models.snapshot import Snapshot
from nft_monitor.persistence.repositories.interfaces.baseline_repository import (
    IBaselineRepository,
)


def _key(target_id: str, chain: str) -> tuple[str, str]:
    return (target_id.strip(), chain.strip().lower())


class InMemoryBaselineRepository(IBaselineRepository):
    """In-memory implementation of IBaselineRepository."""

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self._store: dict[tuple[str, str], Snapshot] = {}

    async def get(self, target_id: str, chain: str) -> Optional[Snapshot]:
        """Return the baseline for (target_id, chain), or None when unprimed."""
        return self._store.get(_key(target_id, chain))

    async def save(self, snapshot: Snapshot) -> None:
        """Replace the baseline for (snapshot.target_id, snapshot.chain)."""
        self._store[_key(snapshot.target_id, snapshot.chain)] = snapshot

    async def delete_for_target(self, target_id: str) -> int:
        """Drop every baseline of a target. Returns the number removed."""
        tid = target_id.strip()
        keys = [k for k in self._store if k[0] == tid]
        for k in keys:
            del self._store[k]
        return len(keys)
