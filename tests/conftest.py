# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest
from structlog.contextvars import get_contextvars

from nft_monitor.models.snapshot import HoldingItem, HoldingSnapshot, SupplySnapshot
from nft_monitor.models.target import Target, TargetKind
from nft_monitor.persistence.repositories.in_memory import (
    InMemoryBaselineRepository,
    InMemoryTargetRepository,
)


class RecordingLogger:
    """Stand-in for a structlog logger that records (level, event, fields).

    contexts holds the structlog contextvars bound when each record was logged.
    """

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []
        self.contexts: list[dict[str, Any]] = []

    def _log(self, level: str, event: str, **kw: Any) -> None:
        self.records.append((level, event, kw))
        self.contexts.append(get_contextvars())

    def debug(self, event: str, **kw: Any) -> None:
        self._log("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log("error", event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        self._log("exception", event, **kw)

    def events(self, level: str | None = None) -> list[str]:
        return [e for lvl, e, _ in self.records if level is None or lvl == level]

    def context_of(self, event: str) -> dict[str, Any]:
        """Contextvars bound when event was first logged."""
        index = [e for _, e, _ in self.records].index(event)
        return self.contexts[index]


@pytest.fixture
def wallet() -> str:
    """Default tracked wallet used by tests."""
    return "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706"


@pytest.fixture
def contract() -> str:
    """Default collection contract used by tests."""
    return "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"


@pytest.fixture
def now_utc() -> datetime:
    """Stable UTC timestamp for deterministic assertions."""
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def get_logger(recording_logger: RecordingLogger) -> Callable[[str], RecordingLogger]:
    """Logger factory returning the shared recording logger."""
    return lambda _name: recording_logger


@pytest.fixture
def supply_target_factory(contract: str) -> Callable[..., Target]:
    """Build a supply-watch Target with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> Target:
        return Target.create(
            kind=TargetKind.SUPPLY_WATCH,
            locator=overrides.pop("locator", contract),
            name=overrides.pop("name", "Apes"),
            threshold=overrides.pop("threshold", 100),
            chains=overrides.pop("chains", ["ethereum"]),
            latched=overrides.pop("latched", False),
            id=overrides.pop("id", None),
            created_at=overrides.pop("created_at", None),
        )

    return _build


@pytest.fixture
def holding_target_factory(wallet: str) -> Callable[..., Target]:
    """Build a holding-watch Target with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> Target:
        return Target.create(
            kind=TargetKind.HOLDING_WATCH,
            locator=overrides.pop("locator", wallet),
            name=overrides.pop("name", "whale"),
            chains=overrides.pop("chains", ["ethereum"]),
            id=overrides.pop("id", None),
            created_at=overrides.pop("created_at", None),
        )

    return _build


@pytest.fixture
def holdings() -> Callable[..., HoldingSnapshot]:
    """holdings(target_id, "A", "B", chain=...) -> HoldingSnapshot of items 0xa..-A etc."""

    def _build(target_id: str, *token_ids: str, chain: str = "ethereum") -> HoldingSnapshot:
        items = [HoldingItem.create("0x" + "a" * 40, tid) for tid in token_ids]
        return HoldingSnapshot.create(target_id, chain, items)

    return _build


@pytest.fixture
def supply() -> Callable[..., SupplySnapshot]:
    def _build(target_id: str, count: int, chain: str = "ethereum") -> SupplySnapshot:
        return SupplySnapshot.create(target_id, chain, count)

    return _build


@pytest.fixture
def target_repo() -> InMemoryTargetRepository:
    """Fresh in-memory target repository per test."""
    return InMemoryTargetRepository()


@pytest.fixture
def baseline_repo() -> InMemoryBaselineRepository:
    """Fresh in-memory baseline repository per test."""
    return InMemoryBaselineRepository()


@pytest.fixture
def settings_ns() -> SimpleNamespace:
    """Minimal settings stand-in for components that read a few fields."""
    return SimpleNamespace(
        api=SimpleNamespace(
            alchemy_api_key="alchemy-key",
            opensea_api_key="opensea-key",
            alchemy_url_template="https://{network}.g.alchemy.com/nft/v2/{api_key}",
            opensea_host="https://api.opensea.io/api/v2",
            ipfs_gateway="https://ipfs.io/ipfs/",
            timeout_seconds=5.0,
            max_pages=3,
        ),
        polling=SimpleNamespace(
            supply_poll_interval_ms=30_000,
            holding_poll_interval_ms=60_000,
            run_on_start=True,
        ),
        dedup=SimpleNamespace(dedup_ttl_ms=600_000, max_entries=100),
        watchlist=SimpleNamespace(default_chains=["ethereum"], holding_wallets=[], store_path=None),
        console=SimpleNamespace(enabled=True),
    )
