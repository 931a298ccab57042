# -*- coding: utf-8 -*-
"""JSON-file target repository.

File layout: {"targets": [Target.to_dict(), ...]}. The older layout with
separate "monitors" (collections) and "wallets" lists is read on load and
rewritten in the new layout on the next save.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, cast

import structlog

from nft_monitor.models.target import Target, TargetKind
from nft_monitor.persistence.repositories.interfaces.target_repository import (
    ITargetRepository,
)


def _legacy_targets(data: dict[str, Any]) -> list[Target]:
    """Convert {"monitors": [...], "wallets": [...]} records into targets."""
    targets: list[Target] = []
    for m in cast(list[dict[str, Any]], data.get("monitors") or []):
        targets.append(
            Target.create(
                kind=TargetKind.SUPPLY_WATCH,
                id=str(m["id"]) if m.get("id") is not None else None,
                name=m.get("name"),
                locator=m.get("slugOrContract") or m.get("contractAddress") or m.get("contract") or "",
                chains=[m.get("chain") or "ethereum"],
                threshold=m.get("threshold"),
                latched=bool(m.get("alerted", False)),
            )
        )
    for w in cast(list[dict[str, Any]], data.get("wallets") or []):
        targets.append(
            Target.create(
                kind=TargetKind.HOLDING_WATCH,
                locator=w.get("address") or "",
                chains=w.get("chains"),
            )
        )
    return targets


class JsonFileTargetRepository(ITargetRepository):
    """Targets kept in memory and written through to a JSON file on every change."""

    def __init__(
        self,
        path: str | Path,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the repository and load the file if it exists.

        Args:
            path: JSON file location (parent directories are created on save).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._path = Path(path)
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._lock = asyncio.Lock()
        self._store: dict[str, Target] = {t.id: t for t in self._load()}

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[Target]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            self._logger.error(
                "target_store_load_failed",
                target_store_path=str(self._path),
                error_message=str(e),
            )
            raise
        if not isinstance(data, dict):
            raise ValueError(f"{self._path}: expected a JSON object")
        data = cast(dict[str, Any], data)
        if "targets" in data:
            targets = [Target.from_dict(t) for t in cast(list[dict[str, Any]], data["targets"])]
        else:
            targets = _legacy_targets(data)
        self._logger.debug(
            "target_store_loaded",
            target_store_path=str(self._path),
            target_store_count=len(targets),
        )
        return targets

    def _write(self, payload: str) -> None:
        """Write via a temp file + replace so readers never see a partial file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self._path)

    async def _flush(self) -> None:
        targets = sorted(self._store.values(), key=lambda t: t.created_at)
        payload = json.dumps({"targets": [t.to_dict() for t in targets]}, indent=2)
        await asyncio.to_thread(self._write, payload)

    async def list_targets(self, kind: TargetKind | None = None) -> list[Target]:
        """Return all targets (optionally only one kind), oldest first."""
        targets = [t for t in self._store.values() if kind is None or t.kind is kind]
        return sorted(targets, key=lambda t: t.created_at)

    async def get(self, target_id: str) -> Optional[Target]:
        """Return the target with this id, or None if missing."""
        return self._store.get(target_id.strip())

    async def save(self, target: Target) -> None:
        """Upsert a target (by id) and persist."""
        async with self._lock:
            self._store[target.id] = target
            await self._flush()

    async def remove(self, target_id: str) -> bool:
        """Delete a target and persist. Returns True if it existed."""
        async with self._lock:
            existed = self._store.pop(target_id.strip(), None) is not None
            if existed:
                await self._flush()
            return existed
