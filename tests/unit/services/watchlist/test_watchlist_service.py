# -*- coding: utf-8 -*-
"""Unit tests for WatchlistService."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from nft_monitor.exceptions import ProviderDataError, UnsupportedChainError
from nft_monitor.models.snapshot import HoldingSnapshot, SupplySnapshot
from nft_monitor.models.target import Target, TargetKind
from nft_monitor.persistence.repositories.in_memory import (
    InMemoryBaselineRepository,
    InMemoryTargetRepository,
)
from nft_monitor.services.dedup import AlertDeduplicator
from nft_monitor.services.polling import StateDiffPoller
from nft_monitor.services.watchlist import WatchlistService


@pytest.fixture
def source() -> SimpleNamespace:
    return SimpleNamespace(fetch_snapshot=AsyncMock())


@pytest.fixture
def service(
    target_repo: InMemoryTargetRepository,
    baseline_repo: InMemoryBaselineRepository,
    source: SimpleNamespace,
    settings_ns: SimpleNamespace,
) -> WatchlistService:
    poller = StateDiffPoller(
        target_repository=target_repo,
        baseline_repository=baseline_repo,
        snapshot_source=cast(Any, source),
        deduplicator=AlertDeduplicator(),
        alert_sink=cast(Any, SimpleNamespace(on_alert=AsyncMock())),
    )
    return WatchlistService(
        target_repository=target_repo,
        baseline_repository=baseline_repo,
        poller=poller,
        snapshot_source=cast(Any, source),
        settings=cast(Any, settings_ns),
    )


async def test_add_supply_watch_uses_default_chains(service: WatchlistService) -> None:
    target = await service.add_supply_watch("Apes", "boredapeyachtclub", 10000)

    assert target.kind is TargetKind.SUPPLY_WATCH
    assert target.chains == ("ethereum",)
    assert await service.list_targets(TargetKind.SUPPLY_WATCH) == [target]


async def test_add_supply_watch_rejects_unsupported_chain(service: WatchlistService) -> None:
    with pytest.raises(UnsupportedChainError):
        await service.add_supply_watch("Apes", "apes", 1, chains=["solana"])
    assert await service.list_targets() == []


async def test_add_holding_watch_validates_and_is_idempotent(service: WatchlistService, wallet: str) -> None:
    with pytest.raises(ValueError):
        await service.add_holding_watch("0xnope")

    first = await service.add_holding_watch(wallet.upper().replace("0X", "0x"), chains=["ethereum", "base"])
    second = await service.add_holding_watch(wallet)

    assert first.id == second.id
    assert first.locator == wallet
    assert first.chains == ("ethereum", "base")


async def test_seed_holding_wallets_skips_invalid_and_existing(service: WatchlistService, wallet: str) -> None:
    await service.add_holding_watch(wallet)

    added = await service.seed_holding_wallets([wallet, "bad", "0x" + "1" * 40])

    assert added == 1
    assert len(await service.list_targets(TargetKind.HOLDING_WATCH)) == 2


async def test_remove_drops_target_and_baselines(
    service: WatchlistService,
    baseline_repo: InMemoryBaselineRepository,
    holdings: Callable[..., HoldingSnapshot],
    wallet: str,
) -> None:
    target = await service.add_holding_watch(wallet)
    await baseline_repo.save(holdings(target.id, "A"))

    assert await service.remove(target.id) is True
    assert await baseline_repo.get(target.id, "ethereum") is None
    assert await service.remove(target.id) is False


async def test_reset_alerts_clears_latches(
    service: WatchlistService,
    target_repo: InMemoryTargetRepository,
    supply_target_factory: Callable[..., Target],
) -> None:
    await target_repo.save(supply_target_factory(id="a", latched=True))
    await target_repo.save(supply_target_factory(id="b", latched=True))

    assert await service.reset_alerts() == 2
    assert await service.reset_alert("a") is True
    assert all(not t.latched for t in await service.list_targets())


async def test_check_now_fetches_each_chain_without_touching_state(
    service: WatchlistService,
    source: SimpleNamespace,
    baseline_repo: InMemoryBaselineRepository,
) -> None:
    target = await service.add_supply_watch("Apes", "apes", 100, chains=["ethereum", "polygon"])

    async def fetch(t: Target, chain: str, *, cancel: Any = None) -> SupplySnapshot:
        if chain == "polygon":
            raise ProviderDataError("total.supply is missing")
        return SupplySnapshot.create(t.id, chain, 150)

    source.fetch_snapshot.side_effect = fetch

    results = await service.check_now(target.id)

    by_chain = {r.chain: r for r in results}
    assert by_chain["ethereum"].ok
    snapshot = by_chain["ethereum"].snapshot
    assert isinstance(snapshot, SupplySnapshot) and snapshot.count == 150
    assert not by_chain["polygon"].ok
    assert "ProviderDataError" in (by_chain["polygon"].error or "")
    assert await baseline_repo.get(target.id, "ethereum") is None
    stored = await service.list_targets()
    assert stored[0].latched is False


async def test_check_now_unknown_target(service: WatchlistService) -> None:
    with pytest.raises(LookupError):
        await service.check_now("missing")
