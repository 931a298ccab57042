"""Abstract interface for tracked target storage (in-memory, JSON file, DB, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from nft_monitor.models.target import Target, TargetKind


class ITargetRepository(ABC):
    """Interface for persisting Target records by id."""

    @abstractmethod
    async def list_targets(self, kind: TargetKind | None = None) -> list[Target]:
        """Return all targets (optionally only one kind), oldest first."""
        ...

    @abstractmethod
    async def get(self, target_id: str) -> Target | None:
        """Return the target with this id, or None if missing."""
        ...

    @abstractmethod
    async def save(self, target: Target) -> None:
        """Upsert a target (by id)."""
        ...

    @abstractmethod
    async def remove(self, target_id: str) -> bool:
        """Delete a target. Returns True if it existed."""
        ...

    async def set_latch(self, target_id: str, latched: bool) -> Target | None:
        """Set or clear the latch on a target. Returns the updated target, or None if missing."""
        target = await self.get(target_id)
        if target is None:
            return None
        if target.latched == latched:
            return target
        updated = target.with_latch(latched)
        await self.save(updated)
        return updated
