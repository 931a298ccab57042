# -*- coding: utf-8 -*-
"""AlertEvent: a notification produced by the poller, filtered by the deduplicator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class AlertKind(str, Enum):
    """Condition that produced the alert."""

    SUPPLY_THRESHOLD_REACHED = "supply_threshold_reached"
    HOLDING_NEW_ITEM = "holding_new_item"


@dataclass(frozen=True, slots=True)
class AlertEvent:
    """One alert. dedup_key is deterministic for (target, condition, identifier)."""

    id: UUID
    kind: AlertKind
    target_id: str
    chain: str
    dedup_key: str
    title: str
    message: str
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    """Display fields for the notification styler."""

    @classmethod
    def create(
        cls,
        *,
        kind: AlertKind,
        target_id: str,
        chain: str,
        dedup_key: str,
        title: str,
        message: str,
        payload: dict[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> AlertEvent:
        return cls(
            id=uuid4(),
            kind=kind,
            target_id=target_id,
            chain=chain,
            dedup_key=dedup_key,
            title=title,
            message=message,
            created_at=created_at or datetime.now(UTC),
            payload=dict(payload or {}),
        )
