# -*- coding: utf-8 -*-
"""Domain models."""

from nft_monitor.models.alert_event import AlertEvent, AlertKind
from nft_monitor.models.snapshot import (
    HoldingItem,
    HoldingSnapshot,
    Snapshot,
    SupplySnapshot,
)
from nft_monitor.models.target import DEFAULT_CHAINS, Target, TargetKind

__all__ = [
    "AlertEvent",
    "AlertKind",
    "DEFAULT_CHAINS",
    "HoldingItem",
    "HoldingSnapshot",
    "Snapshot",
    "SupplySnapshot",
    "Target",
    "TargetKind",
]
