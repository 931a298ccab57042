"""Abstract interface for baseline storage: last snapshot per (target, chain)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from nft_monitor.models.snapshot import Snapshot


class IBaselineRepository(ABC):
    """Baselines are replaced wholesale on save, never merged."""

    @abstractmethod
    async def get(self, target_id: str, chain: str) -> Snapshot | None:
        """Return the baseline for (target_id, chain), or None when unprimed."""
        ...

    @abstractmethod
    async def save(self, snapshot: Snapshot) -> None:
        """Replace the baseline for (snapshot.target_id, snapshot.chain)."""
        ...

    @abstractmethod
    async def delete_for_target(self, target_id: str) -> int:
        """Drop every baseline of a target. Returns the number removed."""
        ...
