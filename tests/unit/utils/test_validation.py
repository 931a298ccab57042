# -*- coding: utf-8 -*-
"""Unit tests for validation helpers, chains and dedupe keys."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from nft_monitor.exceptions import ProviderDataError, UnsupportedChainError
from nft_monitor.models.snapshot import HoldingItem
from nft_monitor.models.target import Target
from nft_monitor.utils import get_chain, is_hex_address, mask_address, parse_count, parse_decimal, resolve_ipfs
from nft_monitor.utils.dedupe import holding_alert_key, supply_alert_key


@pytest.mark.parametrize("value,expected", [(0, 0), (12, 12), ("42", 42), (" 7 ", 7), (10.0, 10), ("1e3", 1000)])
def test_parse_count_accepts_integral_values(value: Any, expected: int) -> None:
    assert parse_count(value) == expected


@pytest.mark.parametrize("value", [None, True, "", "abc", "1.5", 2.5, -1, "-3", "NaN", "inf"])
def test_parse_count_rejects_missing_or_malformed_values(value: Any) -> None:
    with pytest.raises(ProviderDataError):
        parse_count(value, field="total.supply")


def test_parse_decimal_is_best_effort() -> None:
    assert parse_decimal("1.25") == Decimal("1.25")
    assert parse_decimal(None) is None
    assert parse_decimal("n/a") is None


def test_is_hex_address(wallet: str) -> None:
    assert is_hex_address(wallet)
    assert not is_hex_address("0x123")
    assert not is_hex_address("1x" + "a" * 40)
    assert not is_hex_address(None)


def test_mask_address(wallet: str) -> None:
    assert mask_address(wallet) == "0x2d27...7706"
    assert mask_address("short") == "***"


def test_resolve_ipfs() -> None:
    assert resolve_ipfs("ipfs://Qm1/img.png", "https://gw/ipfs/") == "https://gw/ipfs/Qm1/img.png"
    assert resolve_ipfs("ipfs://ipfs/Qm1", "https://gw/ipfs") == "https://gw/ipfs/Qm1"
    assert resolve_ipfs("https://x/y.png") == "https://x/y.png"
    assert resolve_ipfs(None) is None


def test_get_chain_is_case_insensitive_and_rejects_unknown() -> None:
    assert get_chain("Polygon").opensea_chain == "matic"
    with pytest.raises(UnsupportedChainError):
        get_chain("solana")


def test_dedupe_keys_are_deterministic(supply_target_factory: Callable[..., Target]) -> None:
    item = HoldingItem.create("0xABC", "5")
    target = supply_target_factory(id="c1", threshold=100)

    assert holding_alert_key("w1", "ethereum", item) == "holding:w1:ethereum:0xabc-5"
    assert supply_alert_key(target) == "supply:c1:threshold:100"
    assert supply_alert_key(target.with_latch(True)) == supply_alert_key(target)
