# -*- coding: utf-8 -*-
"""In-memory target repository (keyed by target id)."""

from __future__ import annotations

from typing import Optional

from nft_monitor.models.target import Target, TargetKind
from nft_monitor.persistence.repositories.interfaces.target_repository import (
    ITargetRepository,
)


class InMemoryTargetRepository(ITargetRepository):
    """In-memory implementation of ITargetRepository."""

    def __init__(self, targets: list[Target] | None = None) -> None:
        """Initialize the store, optionally pre-populated."""
        self._store: dict[str, Target] = {t.id: t for t in targets or []}

    async def list_targets(self, kind: TargetKind | None = None) -> list[Target]:
        """Return all targets (optionally only one kind), oldest first."""
        targets = [t for t in self._store.values() if kind is None or t.kind is kind]
        return sorted(targets, key=lambda t: t.created_at)

    async def get(self, target_id: str) -> Optional[Target]:
        """Return the target with this id, or None if missing."""
        return self._store.get(target_id.strip())

    async def save(self, target: Target) -> None:
        """Upsert a target (by id)."""
        self._store[target.id] = target

    async def remove(self, target_id: str) -> bool:
        """Delete a target. Returns True if it existed."""
        return self._store.pop(target_id.strip(), None) is not None
