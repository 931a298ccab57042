# -*- coding: utf-8 -*-
"""Snapshots: one observation of a target's remote state on one chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Iterable, Optional


@dataclass(frozen=True, slots=True)
class HoldingItem:
    """One owned token. Identity is (contract, token_id); display fields do not count."""

    contract: str
    token_id: str
    name: Optional[str] = field(default=None, compare=False, hash=False)
    image_url: Optional[str] = field(default=None, compare=False, hash=False)

    @classmethod
    def create(
        cls,
        contract: str,
        token_id: str | int,
        *,
        name: str | None = None,
        image_url: str | None = None,
    ) -> HoldingItem:
        contract = str(contract).strip().lower()
        token = str(token_id).strip()
        if not contract or not token:
            raise ValueError("contract and token_id must be non-empty")
        return cls(contract=contract, token_id=token, name=name, image_url=image_url)

    @property
    def identifier(self) -> str:
        """Composite identifier: {contract}-{token_id}."""
        return f"{self.contract}-{self.token_id}"


@dataclass(frozen=True, slots=True)
class HoldingSnapshot:
    """Set of items a wallet holds on one chain. Unordered; duplicates collapse."""

    target_id: str
    chain: str
    items: frozenset[HoldingItem]
    taken_at: datetime

    @classmethod
    def create(
        cls,
        target_id: str,
        chain: str,
        items: Iterable[HoldingItem],
        *,
        taken_at: datetime | None = None,
    ) -> HoldingSnapshot:
        return cls(
            target_id=target_id,
            chain=chain,
            items=frozenset(items),
            taken_at=taken_at or datetime.now(UTC),
        )

    @property
    def identifiers(self) -> frozenset[str]:
        return frozenset(item.identifier for item in self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class SupplySnapshot:
    """Collection supply count plus optional auxiliary metrics."""

    target_id: str
    chain: str
    count: int
    taken_at: datetime
    floor_price: Optional[Decimal] = None
    image_url: Optional[str] = None
    marketplace_url: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise TypeError("count must be an int")
        if self.count < 0:
            raise ValueError("count must be non-negative")

    @classmethod
    def create(
        cls,
        target_id: str,
        chain: str,
        count: int,
        *,
        floor_price: Decimal | None = None,
        image_url: str | None = None,
        marketplace_url: str | None = None,
        taken_at: datetime | None = None,
    ) -> SupplySnapshot:
        return cls(
            target_id=target_id,
            chain=chain,
            count=count,
            taken_at=taken_at or datetime.now(UTC),
            floor_price=floor_price,
            image_url=image_url,
            marketplace_url=marketplace_url,
        )


type Snapshot = HoldingSnapshot | SupplySnapshot
