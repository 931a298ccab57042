# -*- coding: utf-8 -*-
"""Pure state-diff evaluation: (baseline, snapshot) -> (new baseline, alert events).

No I/O here. The poller owns storage, deduplication and delivery.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from nft_monitor.models.alert_event import AlertEvent, AlertKind
from nft_monitor.models.snapshot import HoldingItem, HoldingSnapshot, SupplySnapshot
from nft_monitor.models.target import Target
from nft_monitor.utils.dedupe import holding_alert_key, supply_alert_key
from nft_monitor.utils.validation import mask_address


@dataclass(frozen=True, slots=True)
class HoldingOutcome:
    """Result of evaluating one holding-watch snapshot."""

    new_baseline: HoldingSnapshot
    events: tuple[AlertEvent, ...] = ()
    primed: bool = False
    """True when there was no baseline: the snapshot only establishes one."""


@dataclass(frozen=True, slots=True)
class SupplyOutcome:
    """Result of evaluating one supply-watch snapshot."""

    latch: bool
    """Latch value after evaluation."""
    events: tuple[AlertEvent, ...] = field(default=())

    @property
    def fired(self) -> bool:
        return bool(self.events)


def added_items(baseline: HoldingSnapshot, snapshot: HoldingSnapshot) -> list[HoldingItem]:
    """Items in snapshot but not in baseline, ordered by identifier."""
    return sorted(snapshot.items - baseline.items, key=lambda i: (i.contract, i.token_id))


def holding_event(target: Target, chain: str, item: HoldingItem) -> AlertEvent:
    wallet = mask_address(target.locator)
    label = item.name or f"#{item.token_id}"
    return AlertEvent.create(
        kind=AlertKind.HOLDING_NEW_ITEM,
        target_id=target.id,
        chain=chain,
        dedup_key=holding_alert_key(target.id, chain, item),
        title=f"New NFT in {target.name}",
        message=f"Wallet {wallet} received {label} ({item.contract}) on {chain}",
        payload={
            "target_name": target.name,
            "wallet": target.locator,
            "chain": chain,
            "contract": item.contract,
            "token_id": item.token_id,
            "item_name": item.name,
            "image_url": item.image_url,
        },
    )


def supply_event(target: Target, snapshot: SupplySnapshot) -> AlertEvent:
    return AlertEvent.create(
        kind=AlertKind.SUPPLY_THRESHOLD_REACHED,
        target_id=target.id,
        chain=snapshot.chain,
        dedup_key=supply_alert_key(target),
        title=f"{target.name} reached its supply threshold",
        message=(
            f"{target.name} supply is {snapshot.count} "
            f"(threshold {target.threshold}) on {snapshot.chain}"
        ),
        payload={
            "target_name": target.name,
            "locator": target.locator,
            "chain": snapshot.chain,
            "count": snapshot.count,
            "threshold": target.threshold,
            "floor_price": snapshot.floor_price,
            "image_url": snapshot.image_url,
            "marketplace_url": snapshot.marketplace_url,
        },
    )


def evaluate_holding_watch(
    target: Target,
    chain: str,
    baseline: HoldingSnapshot | None,
    snapshot: HoldingSnapshot,
) -> HoldingOutcome:
    """Diff a holdings snapshot against its baseline.

    Unprimed: the snapshot becomes the baseline and nothing fires. Primed: one
    event per newly held item; removals are silent. The baseline is always
    replaced wholesale by the snapshot.
    """
    if baseline is None:
        return HoldingOutcome(new_baseline=snapshot, primed=True)
    events = tuple(holding_event(target, chain, item) for item in added_items(baseline, snapshot))
    return HoldingOutcome(new_baseline=snapshot, events=events)


def evaluate_supply_watch(target: Target, snapshot: SupplySnapshot) -> SupplyOutcome:
    """Edge-triggered threshold check.

    Fires once when count >= threshold and the target is not latched, and
    sets the latch. Dropping back below the threshold leaves the latch as is.
    """
    if target.threshold is None:
        raise ValueError("supply-watch target has no threshold")
    if target.latched:
        return SupplyOutcome(latch=True)
    if snapshot.count >= target.threshold:
        return SupplyOutcome(latch=True, events=(supply_event(target, snapshot),))
    return SupplyOutcome(latch=False)
