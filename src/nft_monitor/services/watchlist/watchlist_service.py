# -*- coding: utf-8 -*-
"""Watchlist operations: add, remove, list, reset and on-demand checks of targets."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import structlog

from nft_monitor.models.target import Target, TargetKind
from nft_monitor.utils.chains import get_chain
from nft_monitor.utils.validation import is_hex_address, mask_address

if TYPE_CHECKING:
    from nft_monitor.config import Settings
    from nft_monitor.models.snapshot import Snapshot
    from nft_monitor.persistence.repositories.interfaces import (
        IBaselineRepository,
        ITargetRepository,
    )
    from nft_monitor.services.polling.state_diff_poller import StateDiffPoller
    from nft_monitor.sources.base import SnapshotSource


@dataclass(frozen=True)
class CheckResult:
    """Outcome of an on-demand fetch for one chain."""

    chain: str
    snapshot: Snapshot | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


class WatchlistService:
    """Manages tracked targets on behalf of the operator."""

    def __init__(
        self,
        target_repository: ITargetRepository,
        baseline_repository: IBaselineRepository,
        poller: StateDiffPoller,
        snapshot_source: SnapshotSource,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            target_repository: Target storage.
            baseline_repository: Baseline storage (cleared on remove).
            poller: Poller owning latches and dedup state.
            snapshot_source: Used by check_now (its requests are governed).
            settings: Application settings (uses settings.watchlist.default_chains).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._targets = target_repository
        self._baselines = baseline_repository
        self._poller = poller
        self._source = snapshot_source
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _chains(self, chains: Iterable[str] | None) -> list[str]:
        labels = [c.strip().lower() for c in (chains or self._settings.watchlist.default_chains)]
        for label in labels:
            get_chain(label)
        return labels

    async def add_supply_watch(
        self,
        name: str,
        locator: str,
        threshold: int,
        chains: Iterable[str] | None = None,
    ) -> Target:
        """Track a collection (contract address or slug) until its supply reaches threshold.

        Raises:
            ValueError: Invalid locator or threshold.
            UnsupportedChainError: A chain is not served.
        """
        target = Target.create(
            kind=TargetKind.SUPPLY_WATCH,
            name=name,
            locator=locator,
            threshold=threshold,
            chains=self._chains(chains),
        )
        await self._targets.save(target)
        self._logger.info(
            "watchlist_supply_watch_added",
            target_id=target.id,
            target_name=target.name,
            supply_threshold=target.threshold,
            target_chains=list(target.chains),
        )
        return target

    async def add_holding_watch(
        self,
        address: str,
        chains: Iterable[str] | None = None,
        *,
        name: str | None = None,
    ) -> Target:
        """Track a wallet's holdings. Adding an address already tracked returns the existing target.

        Raises:
            ValueError: address is not a 0x wallet address (42 chars).
            UnsupportedChainError: A chain is not served.
        """
        if not is_hex_address(address):
            raise ValueError("address must be a valid 0x wallet address (42 chars)")
        address = address.strip().lower()
        for existing in await self._targets.list_targets(TargetKind.HOLDING_WATCH):
            if existing.locator == address:
                return existing
        target = Target.create(
            kind=TargetKind.HOLDING_WATCH,
            name=name or mask_address(address),
            locator=address,
            chains=self._chains(chains),
        )
        await self._targets.save(target)
        self._logger.info(
            "watchlist_holding_watch_added",
            target_id=target.id,
            wallet_masked=mask_address(address),
            target_chains=list(target.chains),
        )
        return target

    async def seed_holding_wallets(
        self,
        wallets: Iterable[str],
        chains: Iterable[str] | None = None,
    ) -> int:
        """Ensure every configured wallet has a holding watch. Returns how many were added."""
        before = len(await self._targets.list_targets(TargetKind.HOLDING_WATCH))
        for wallet in wallets:
            try:
                await self.add_holding_watch(wallet, chains)
            except ValueError:
                self._logger.warning(
                    "watchlist_seed_wallet_invalid",
                    wallet_masked=mask_address(wallet),
                )
        added = len(await self._targets.list_targets(TargetKind.HOLDING_WATCH)) - before
        return added

    async def remove(self, target_id: str) -> bool:
        """Stop tracking a target and drop its baselines. Returns True if it existed."""
        removed = await self._targets.remove(target_id)
        if not removed:
            return False
        dropped = await self._baselines.delete_for_target(target_id)
        self._poller.forget_target(target_id)
        self._logger.info(
            "watchlist_target_removed",
            target_id=target_id,
            baselines_dropped=dropped,
        )
        return True

    async def list_targets(self, kind: TargetKind | None = None) -> list[Target]:
        return await self._targets.list_targets(kind)

    async def reset_alerts(self) -> int:
        """Clear every supply-watch latch. Returns how many were latched."""
        return await self._poller.reset_all_latches()

    async def reset_alert(self, target_id: str) -> bool:
        return await self._poller.reset_latch(target_id)

    async def check_now(
        self,
        target_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[CheckResult]:
        """Fetch the current snapshot on every chain of a target, without diffing or alerting.

        Raises:
            LookupError: Unknown target id.
        """
        target = await self._targets.get(target_id)
        if target is None:
            raise LookupError(f"Unknown target: {target_id}")

        async def _check(chain: str) -> CheckResult:
            try:
                snapshot = await self._source.fetch_snapshot(target, chain, cancel=cancel)
            except Exception as e:
                self._logger.warning(
                    "watchlist_check_failed",
                    target_id=target.id,
                    chain=chain,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                return CheckResult(chain=chain, error=f"{type(e).__name__}: {e}")
            return CheckResult(chain=chain, snapshot=snapshot)

        return list(await asyncio.gather(*(_check(c) for c in target.chains)))
