# -*- coding: utf-8 -*-
"""State-diff polling engine: fetch, diff against baseline, dedupe, deliver, persist."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.contextvars import bound_contextvars

from nft_monitor.exceptions import OperationCancelled, ProviderDataError
from nft_monitor.governor.cancellation import raise_if_cancelled
from nft_monitor.models.snapshot import HoldingSnapshot, Snapshot, SupplySnapshot
from nft_monitor.models.target import Target, TargetKind
from nft_monitor.services.polling.state_diff import (
    evaluate_holding_watch,
    evaluate_supply_watch,
)
from nft_monitor.utils.dedupe import supply_alert_key

if TYPE_CHECKING:
    from nft_monitor.models.alert_event import AlertEvent
    from nft_monitor.persistence.repositories.interfaces import (
        IBaselineRepository,
        ITargetRepository,
    )
    from nft_monitor.services.alerts.alert_notifier import AlertSink
    from nft_monitor.services.dedup.alert_deduplicator import AlertDeduplicator
    from nft_monitor.sources.base import SnapshotSource


@dataclass
class PollCycleResult:
    """Counters for one tick."""

    kind: TargetKind | None = None
    polled: int = 0
    """Pairs whose snapshot was fetched and evaluated."""
    skipped: int = 0
    """Pairs skipped because their previous poll was still running."""
    failed: int = 0
    cancelled: int = 0
    primed: int = 0
    alerts_emitted: int = 0
    alerts_suppressed: int = 0
    delivery_failures: int = 0


class StateDiffPoller:
    """Polls every (target, chain) pair once per tick.

    Each pair is isolated: a failure is logged and leaves its baseline and
    latch untouched, without affecting other pairs. A pair whose previous poll
    has not finished is skipped rather than queued.
    """

    def __init__(
        self,
        target_repository: ITargetRepository,
        baseline_repository: IBaselineRepository,
        snapshot_source: SnapshotSource,
        deduplicator: AlertDeduplicator,
        alert_sink: AlertSink,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the poller.

        Args:
            target_repository: Source of targets; receives latch updates.
            baseline_repository: Last snapshot per (target, chain).
            snapshot_source: Fetches snapshots. Its requests are governed individually.
            deduplicator: Suppresses repeated alerts within its TTL.
            alert_sink: Receives alerts that survive deduplication.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._targets = target_repository
        self._baselines = baseline_repository
        self._source = snapshot_source
        self._dedup = deduplicator
        self._sink = alert_sink
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._in_flight: set[tuple[str, str]] = set()
        self._latch_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def in_flight(self) -> frozenset[tuple[str, str]]:
        return frozenset(self._in_flight)

    async def tick(
        self,
        kind: TargetKind | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> PollCycleResult:
        """Poll all pairs of the given kind (all kinds when None) concurrently."""
        result = PollCycleResult(kind=kind)
        targets = await self._targets.list_targets(kind)
        jobs = []
        claimed: list[tuple[str, str]] = []
        for target in targets:
            for chain in target.chains:
                key = (target.id, chain)
                if key in self._in_flight:
                    result.skipped += 1
                    self._logger.debug(
                        "poll_pair_skipped_in_flight",
                        target_id=target.id,
                        chain=chain,
                    )
                    continue
                self._in_flight.add(key)
                claimed.append(key)
                jobs.append(self._run_pair(target, chain, result, cancel))

        try:
            outcomes = await asyncio.gather(*jobs, return_exceptions=True)
        finally:
            # a pair task cancelled before its first step never reaches its own finally
            self._in_flight.difference_update(claimed)
        result.cancelled += sum(isinstance(o, asyncio.CancelledError) for o in outcomes)

        self._logger.info(
            "poll_cycle_completed",
            poll_kind=kind.value if kind else "all",
            poll_targets_count=len(targets),
            poll_polled=result.polled,
            poll_skipped=result.skipped,
            poll_failed=result.failed,
            poll_cancelled=result.cancelled,
            poll_primed=result.primed,
            poll_alerts_emitted=result.alerts_emitted,
            poll_alerts_suppressed=result.alerts_suppressed,
        )
        return result

    async def _run_pair(
        self,
        target: Target,
        chain: str,
        result: PollCycleResult,
        cancel: asyncio.Event | None,
    ) -> None:
        try:
            with bound_contextvars(target_id=target.id, chain=chain, target_kind=target.kind.value):
                try:
                    await self._poll_pair(target, chain, result, cancel)
                except Exception as e:
                    result.failed += 1
                    self._logger.exception(
                        "poll_pair_unhandled_error",
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
        finally:
            self._in_flight.discard((target.id, chain))

    async def _poll_pair(
        self,
        target: Target,
        chain: str,
        result: PollCycleResult,
        cancel: asyncio.Event | None,
    ) -> None:
        try:
            raise_if_cancelled(cancel)
            snapshot = await self._source.fetch_snapshot(target, chain, cancel=cancel)
        except OperationCancelled:
            result.cancelled += 1
            self._logger.debug("poll_pair_cancelled")
            return
        except Exception as e:
            result.failed += 1
            self._logger.warning(
                "poll_pair_fetch_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return

        try:
            if target.is_holding_watch:
                await self._apply_holding(target, chain, snapshot, result)
            else:
                await self._apply_supply(target, snapshot, result)
        except ProviderDataError as e:
            result.failed += 1
            self._logger.warning(
                "poll_pair_snapshot_invalid",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return
        result.polled += 1

    async def _apply_holding(
        self,
        target: Target,
        chain: str,
        snapshot: Snapshot,
        result: PollCycleResult,
    ) -> None:
        if not isinstance(snapshot, HoldingSnapshot):
            raise ProviderDataError(f"Expected holdings snapshot, got {type(snapshot).__name__}")
        if await self._target_removed(target.id):
            return

        baseline = await self._baselines.get(target.id, chain)
        outcome = evaluate_holding_watch(
            target,
            chain,
            baseline if isinstance(baseline, HoldingSnapshot) else None,
            snapshot,
        )
        if outcome.primed:
            result.primed += 1
            self._logger.info("holding_watch_primed", holding_items_count=len(snapshot))
        await self._emit_all(outcome.events, result)
        if await self._target_removed(target.id):
            return
        await self._baselines.save(outcome.new_baseline)

    async def _apply_supply(
        self,
        target: Target,
        snapshot: Snapshot,
        result: PollCycleResult,
    ) -> None:
        if not isinstance(snapshot, SupplySnapshot):
            raise ProviderDataError(f"Expected supply snapshot, got {type(snapshot).__name__}")

        # Chains of one target share a single latch.
        async with self._latch_locks[target.id]:
            current = await self._targets.get(target.id)
            if current is None:
                self._logger.debug("poll_pair_target_removed")
                return
            outcome = evaluate_supply_watch(current, snapshot)
            self._logger.debug(
                "supply_watch_evaluated",
                supply_count=snapshot.count,
                supply_threshold=current.threshold,
                supply_latched=current.latched,
            )
            await self._emit_all(outcome.events, result)
            if await self._target_removed(current.id):
                return
            if outcome.latch != current.latched:
                await self._targets.set_latch(current.id, outcome.latch)
            await self._baselines.save(snapshot)

    async def _target_removed(self, target_id: str) -> bool:
        """True once the target was removed while its poll was running."""
        if await self._targets.get(target_id) is None:
            self._logger.debug("poll_pair_target_removed")
            return True
        return False

    async def _emit_all(self, events: Iterable[AlertEvent], result: PollCycleResult) -> None:
        for event in events:
            if not self._dedup.should_emit(event.dedup_key):
                result.alerts_suppressed += 1
                continue
            try:
                await self._sink.on_alert(event)
            except Exception as e:
                # State still advances: the alert is lost, not retried.
                result.delivery_failures += 1
                self._logger.warning(
                    "alert_delivery_failed",
                    alert_kind=event.kind.value,
                    alert_dedup_key=event.dedup_key,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                continue
            result.alerts_emitted += 1
            self._logger.info(
                "alert_emitted",
                alert_kind=event.kind.value,
                alert_dedup_key=event.dedup_key,
            )

    async def reset_latch(self, target_id: str) -> bool:
        """Clear a supply-watch latch so the next crossing alerts again.

        Returns:
            True if the target exists and is a supply-watch.
        """
        target = await self._targets.get(target_id)
        if target is None or not target.is_supply_watch:
            return False
        async with self._latch_locks[target.id]:
            await self._targets.set_latch(target.id, False)
            self._dedup.forget(supply_alert_key(target))
        self._logger.info("supply_latch_reset", target_id=target.id, supply_was_latched=target.latched)
        return True

    async def reset_all_latches(self) -> int:
        """Clear every supply-watch latch. Returns how many were set."""
        count = 0
        for target in await self._targets.list_targets(TargetKind.SUPPLY_WATCH):
            await self.reset_latch(target.id)
            if target.latched:
                count += 1
        self._logger.info("supply_latches_reset", supply_reset_count=count)
        return count

    def forget_target(self, target_id: str) -> None:
        """Drop per-target bookkeeping after a target is removed."""
        self._latch_locks.pop(target_id, None)
