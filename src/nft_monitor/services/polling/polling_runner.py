"""Orchestrator: one fixed-cadence polling loop per watch kind until shutdown."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from nft_monitor.config import Settings
from nft_monitor.exceptions import OperationCancelled
from nft_monitor.governor.cancellation import cancellable_sleep
from nft_monitor.models.target import TargetKind

if TYPE_CHECKING:
    from nft_monitor.services.polling.state_diff_poller import StateDiffPoller


class PollingRunner:
    """Runs poller.tick(kind) on each kind's interval until shutdown_event or CancelledError."""

    def __init__(
        self,
        poller: StateDiffPoller,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            poller: Injected StateDiffPoller.
            settings: Application settings (uses settings.polling for intervals).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._poller = poller
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def intervals(self) -> dict[TargetKind, float]:
        """Poll interval in seconds per watch kind."""
        p = self._settings.polling
        return {
            TargetKind.SUPPLY_WATCH: p.supply_poll_interval_ms / 1000.0,
            TargetKind.HOLDING_WATCH: p.holding_poll_interval_ms / 1000.0,
        }

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Start one loop per kind; wait for shutdown_event or CancelledError; drain ticks.

        Setting shutdown_event also aborts token/slot waits and backoff sleeps of
        running ticks, so draining is quick.
        """
        intervals = self.intervals()
        self._logger.info(
            "polling_runner_started",
            polling_supply_interval_seconds=intervals[TargetKind.SUPPLY_WATCH],
            polling_holding_interval_seconds=intervals[TargetKind.HOLDING_WATCH],
            polling_run_on_start=self._settings.polling.run_on_start,
        )
        loops = [
            asyncio.create_task(self._loop(kind, interval, shutdown_event))
            for kind, interval in intervals.items()
        ]

        try:
            await shutdown_event.wait()
        except asyncio.CancelledError:
            self._logger.info(
                "polling_runner_shutdown_cancelled",
                message="Kernel or task cancelled; stopping system",
            )
            for t in loops:
                t.cancel()
            for t in loops:
                try:
                    await t
                except asyncio.CancelledError:
                    pass
            raise

        self._logger.info("polling_runner_shutdown_started")
        await asyncio.gather(*loops, return_exceptions=True)
        self._logger.info("polling_runner_stopped")

    async def _loop(self, kind: TargetKind, interval: float, shutdown_event: asyncio.Event) -> None:
        """Launch a tick every interval seconds; a slow tick never delays the next one."""
        loop = asyncio.get_running_loop()
        ticks: set[asyncio.Task[None]] = set()
        next_at = loop.time() if self._settings.polling.run_on_start else loop.time() + interval
        try:
            while not shutdown_event.is_set():
                try:
                    await cancellable_sleep(next_at - loop.time(), shutdown_event)
                except OperationCancelled:
                    break
                task = asyncio.create_task(self._tick(kind, shutdown_event))
                ticks.add(task)
                task.add_done_callback(ticks.discard)
                now = loop.time()
                next_at += interval
                if next_at <= now:
                    # Missed boundaries are dropped, not replayed.
                    next_at = now + interval
        except asyncio.CancelledError:
            for t in list(ticks):
                t.cancel()
            raise
        finally:
            if ticks:
                await asyncio.gather(*ticks, return_exceptions=True)

    async def _tick(self, kind: TargetKind, shutdown_event: asyncio.Event) -> None:
        try:
            await self._poller.tick(kind, cancel=shutdown_event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.exception(
                "polling_tick_failed",
                poll_kind=kind.value,
                error_type=type(e).__name__,
                error_message=str(e),
            )
