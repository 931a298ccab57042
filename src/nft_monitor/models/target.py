# -*- coding: utf-8 -*-
"""Target: a tracked collection (supply-watch) or wallet (holding-watch).

Owned by the target repository. The polling engine only reads targets and
writes back the latch flag.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Iterable, Optional
from uuid import uuid4

from nft_monitor.utils.validation import is_hex_address


class TargetKind(str, Enum):
    """What kind of remote state a target watches."""

    SUPPLY_WATCH = "supply-watch"
    HOLDING_WATCH = "holding-watch"


DEFAULT_CHAINS: tuple[str, ...] = ("ethereum",)


def _normalize_chains(chains: Iterable[str] | None) -> tuple[str, ...]:
    """Lowercase, strip and dedupe chain labels, preserving order."""
    seen: list[str] = []
    for c in chains or ():
        label = str(c).strip().lower()
        if label and label not in seen:
            seen.append(label)
    return tuple(seen) or DEFAULT_CHAINS


@dataclass(frozen=True, slots=True)
class Target:
    """A tracked entity.

    Identity: id. locator is a contract address or collection slug for
    supply-watch, a wallet address for holding-watch.
    """

    id: str
    kind: TargetKind
    name: str
    locator: str
    chains: tuple[str, ...]
    threshold: Optional[int]
    """Supply count that triggers the alert (supply-watch only)."""
    latched: bool
    """LatchState: True once the threshold alert fired; cleared only by an explicit reset."""
    created_at: datetime

    @classmethod
    def create(
        cls,
        *,
        kind: TargetKind | str,
        locator: str,
        name: str | None = None,
        chains: Iterable[str] | None = None,
        threshold: int | None = None,
        latched: bool = False,
        id: str | None = None,
        created_at: datetime | None = None,
    ) -> Target:
        """Create a validated, normalized target."""
        kind = TargetKind(kind)
        locator = (locator or "").strip()
        if not locator:
            raise ValueError("locator must be non-empty")
        if is_hex_address(locator):
            locator = locator.lower()

        if kind is TargetKind.HOLDING_WATCH:
            if not is_hex_address(locator):
                raise ValueError("holding-watch locator must be a 0x wallet address (42 chars)")
            threshold = None
            latched = False
        else:
            if threshold is None or isinstance(threshold, bool):
                raise ValueError("supply-watch requires an integer threshold")
            threshold = int(threshold)
            if threshold < 0:
                raise ValueError("threshold must be non-negative")

        return cls(
            id=(id or uuid4().hex).strip(),
            kind=kind,
            name=(name or locator).strip(),
            locator=locator,
            chains=_normalize_chains(chains),
            threshold=threshold,
            latched=bool(latched),
            created_at=created_at or datetime.now(UTC),
        )

    @property
    def is_supply_watch(self) -> bool:
        return self.kind is TargetKind.SUPPLY_WATCH

    @property
    def is_holding_watch(self) -> bool:
        return self.kind is TargetKind.HOLDING_WATCH

    def with_latch(self, latched: bool) -> Target:
        """Return a copy with the latch set or cleared."""
        return replace(self, latched=latched)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "locator": self.locator,
            "chains": list(self.chains),
            "threshold": self.threshold,
            "latched": self.latched,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Target:
        """Inverse of to_dict. Missing optional fields take their defaults."""
        created_raw = data.get("created_at")
        created_at = datetime.fromisoformat(created_raw) if isinstance(created_raw, str) else None
        return cls.create(
            kind=data["kind"],
            locator=data.get("locator") or data.get("contract_address") or data.get("address") or "",
            name=data.get("name"),
            chains=data.get("chains"),
            threshold=data.get("threshold"),
            latched=bool(data.get("latched", False)),
            id=data.get("id"),
            created_at=created_at,
        )
