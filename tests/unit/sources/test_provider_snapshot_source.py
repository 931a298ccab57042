# -*- coding: utf-8 -*-
"""Unit tests for ProviderSnapshotSource."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from nft_monitor.exceptions import NetworkError, ProviderDataError, UnsupportedChainError
from nft_monitor.models.snapshot import HoldingSnapshot, SupplySnapshot
from nft_monitor.models.target import Target
from nft_monitor.sources import ProviderSnapshotSource, SnapshotSource


def _source(
    settings_ns: SimpleNamespace,
    *,
    alchemy: Any = None,
    opensea: Any = None,
) -> ProviderSnapshotSource:
    alchemy = alchemy or SimpleNamespace(enabled=True)
    opensea = opensea or SimpleNamespace(enabled=True)
    return ProviderSnapshotSource(cast(Any, alchemy), cast(Any, opensea), cast(Any, settings_ns))


def test_provider_source_satisfies_protocol(settings_ns: SimpleNamespace) -> None:
    assert isinstance(_source(settings_ns), SnapshotSource)


async def test_holdings_are_built_from_owned_nfts(
    settings_ns: SimpleNamespace,
    holding_target_factory: Callable[..., Target],
) -> None:
    owned = [
        {
            "contract": {"address": "0xABCDEF0000000000000000000000000000000001"},
            "id": {"tokenId": "0x0a"},
            "title": "Ten",
            "media": [{"gateway": "ipfs://QmTen"}],
        },
        {
            "contractAddress": "0xabcdef0000000000000000000000000000000002",
            "tokenId": "7",
            "metadata": {"name": "Seven", "image": "https://img/7.png"},
        },
        {"contract": {}, "id": {"tokenId": "1"}},
    ]
    alchemy = SimpleNamespace(enabled=True, get_nfts_for_owner=AsyncMock(return_value=owned))
    target = holding_target_factory(id="w1")

    snapshot = await _source(settings_ns, alchemy=alchemy).fetch_snapshot(target, "ethereum")

    assert isinstance(snapshot, HoldingSnapshot)
    assert snapshot.identifiers == frozenset(
        {
            "0xabcdef0000000000000000000000000000000001-10",
            "0xabcdef0000000000000000000000000000000002-7",
        }
    )
    by_token = {i.token_id: i for i in snapshot.items}
    assert by_token["10"].name == "Ten"
    assert by_token["10"].image_url == "https://ipfs.io/ipfs/QmTen"
    assert by_token["7"].image_url == "https://img/7.png"


async def test_supply_from_opensea_stats_resolving_address_to_slug(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
    contract: str,
) -> None:
    opensea = SimpleNamespace(
        enabled=True,
        get_collection_slug=AsyncMock(return_value="apes"),
        get_collection_stats=AsyncMock(return_value={"supply": "9998", "floor_price": 12.5}),
        get_collection=AsyncMock(
            return_value={"image_url": "ipfs://QmApe", "opensea_url": "https://opensea.io/collection/apes"}
        ),
    )
    target = supply_target_factory(id="c1", locator=contract)

    snapshot = await _source(settings_ns, opensea=opensea).fetch_snapshot(target, "ethereum")

    assert isinstance(snapshot, SupplySnapshot)
    assert snapshot.count == 9998
    assert snapshot.floor_price == Decimal("12.5")
    assert snapshot.image_url == "https://ipfs.io/ipfs/QmApe"
    assert snapshot.marketplace_url == "https://opensea.io/collection/apes"
    opensea.get_collection_slug.assert_awaited_once_with(contract, "ethereum", cancel=None)


async def test_slug_locator_skips_resolution(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
) -> None:
    opensea = SimpleNamespace(
        enabled=True,
        get_collection_slug=AsyncMock(),
        get_collection_stats=AsyncMock(return_value={"supply": 5}),
        get_collection=AsyncMock(return_value={}),
    )
    target = supply_target_factory(id="c1", locator="apes")

    snapshot = await _source(settings_ns, opensea=opensea).fetch_snapshot(target, "ethereum")

    assert isinstance(snapshot, SupplySnapshot) and snapshot.count == 5
    opensea.get_collection_slug.assert_not_awaited()
    opensea.get_collection_stats.assert_awaited_once_with("apes", cancel=None)


async def test_metadata_failure_does_not_fail_the_snapshot(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
) -> None:
    opensea = SimpleNamespace(
        enabled=True,
        get_collection_stats=AsyncMock(return_value={"supply": 5}),
        get_collection=AsyncMock(side_effect=NetworkError("down")),
    )
    target = supply_target_factory(id="c1", locator="apes")

    snapshot = await _source(settings_ns, opensea=opensea).fetch_snapshot(target, "ethereum")

    assert isinstance(snapshot, SupplySnapshot)
    assert snapshot.count == 5 and snapshot.image_url is None


async def test_falls_back_to_alchemy_total_supply_for_unknown_collections(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
    contract: str,
) -> None:
    opensea = SimpleNamespace(enabled=True, get_collection_slug=AsyncMock(return_value=None))
    alchemy = SimpleNamespace(enabled=True, get_contract_total_supply=AsyncMock(return_value="321"))
    target = supply_target_factory(id="c1", locator=contract)

    snapshot = await _source(settings_ns, alchemy=alchemy, opensea=opensea).fetch_snapshot(target, "base")

    assert isinstance(snapshot, SupplySnapshot)
    assert snapshot.count == 321
    assert snapshot.chain == "base"


async def test_missing_count_is_a_data_error_never_zero(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
    contract: str,
) -> None:
    opensea = SimpleNamespace(enabled=False)
    alchemy = SimpleNamespace(enabled=True, get_contract_total_supply=AsyncMock(return_value=None))
    target = supply_target_factory(id="c1", locator=contract)

    with pytest.raises(ProviderDataError):
        await _source(settings_ns, alchemy=alchemy, opensea=opensea).fetch_snapshot(target, "ethereum")


async def test_slug_without_opensea_data_is_a_data_error(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
) -> None:
    opensea = SimpleNamespace(enabled=True, get_collection_stats=AsyncMock(return_value={}))
    target = supply_target_factory(id="c1", locator="apes")

    with pytest.raises(ProviderDataError):
        await _source(settings_ns, opensea=opensea).fetch_snapshot(target, "ethereum")


async def test_unsupported_chain_is_rejected_before_any_call(
    settings_ns: SimpleNamespace,
    supply_target_factory: Callable[..., Target],
) -> None:
    opensea = SimpleNamespace(enabled=True, get_collection_stats=AsyncMock())
    target = supply_target_factory(id="c1", locator="apes")

    with pytest.raises(UnsupportedChainError):
        await _source(settings_ns, opensea=opensea).fetch_snapshot(target, "solana")
    opensea.get_collection_stats.assert_not_awaited()


async def test_holdings_forward_cancel_and_truncation_errors(
    settings_ns: SimpleNamespace,
    holding_target_factory: Callable[..., Target],
) -> None:
    alchemy = SimpleNamespace(
        enabled=True,
        get_nfts_for_owner=AsyncMock(side_effect=ProviderDataError("getNFTs returned more than 3 pages")),
    )
    target = holding_target_factory(id="w1")
    cancel = asyncio.Event()

    with pytest.raises(ProviderDataError):
        await _source(settings_ns, alchemy=alchemy).fetch_snapshot(target, "ethereum", cancel=cancel)

    alchemy.get_nfts_for_owner.assert_awaited_once_with(target.locator, "ethereum", cancel=cancel)
