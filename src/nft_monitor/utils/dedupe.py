# -*- coding: utf-8 -*-
"""Deterministic deduplication keys for alert conditions."""

from __future__ import annotations

from nft_monitor.models.snapshot import HoldingItem
from nft_monitor.models.target import Target


def holding_alert_key(target_id: str, chain: str, item: HoldingItem) -> str:
    """Key for 'wallet now holds item' on one chain."""
    return f"holding:{target_id}:{chain}:{item.identifier}"


def supply_alert_key(target: Target) -> str:
    """Key for 'collection reached its threshold'. Chain-independent: the latch is per target."""
    return f"supply:{target.id}:threshold:{target.threshold}"
