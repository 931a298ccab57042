# -*- coding: utf-8 -*-
"""
Entry point for the NFT monitor.

Orchestrates: logging, settings, container, wallet seeding, polling runner, shutdown (SIGINT/SIGTERM or CancelledError).
Alerts flow: runner -> poller -> snapshot source -> (governor per HTTP request) -> diff -> deduplicator -> alert sink -> notifications.

Run with: python -m nft_monitor.main

Notebook usage:
    from nft_monitor.main import run
    await run()  # Interrupt kernel to stop; system will shut down on CancelledError.
"""
from __future__ import annotations

import asyncio
import signal
import structlog
from typing import Any

from nft_monitor.DI import Container
from nft_monitor.config import get_settings
from nft_monitor.exceptions import MissingRequiredConfigError
from nft_monitor.logging.config import configure_logging
from nft_monitor.models.target import TargetKind
from nft_monitor.notifications.types import NotificationMessage


def _setup_signals(shutdown_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            pass  # Windows has no add_signal_handler


async def _do_shutdown(container: Container, logger: Any) -> None:
    """Clean shutdown. Safe to call on normal shutdown or CancelledError."""
    await container.governor().aclose()
    await container.http_client().aclose()
    logger.info("main_shutdown_complete")


async def run() -> None:
    configure_logging()
    logger = structlog.get_logger("main")
    settings = get_settings()
    if not settings.api.alchemy_api_key and not settings.api.opensea_api_key:
        logger.error(
            "main_missing_provider_keys",
            message="Neither API__ALCHEMY_API_KEY nor API__OPENSEA_API_KEY is set",
        )
        raise MissingRequiredConfigError("API__ALCHEMY_API_KEY or API__OPENSEA_API_KEY")

    container = Container()
    watchlist = container.watchlist_service()
    runner = container.polling_runner()
    notification_service = container.notification_service()
    await notification_service.initialize()
    shutdown_event = asyncio.Event()
    _setup_signals(shutdown_event)

    wallets = settings.watchlist.holding_wallets
    seeded = await watchlist.seed_holding_wallets(wallets)
    supply_watches = await watchlist.list_targets(TargetKind.SUPPLY_WATCH)
    holding_watches = await watchlist.list_targets(TargetKind.HOLDING_WATCH)
    logger.info(
        "main_monitoring_started",
        supply_watch_count=len(supply_watches),
        holding_watch_count=len(holding_watches),
        holding_wallets_seeded=seeded,
    )
    notification_service.notify(
        NotificationMessage(
            event_type="system_started",
            message="NFT monitor started",
            payload={
                "supply_watch_count": len(supply_watches),
                "holding_watch_count": len(holding_watches),
                "wallets": [t.locator for t in holding_watches],
            },
        )
    )

    try:
        try:
            await runner.run(shutdown_event)
        except asyncio.CancelledError:
            shutdown_event.set()
            raise
    finally:
        notification_service.notify(
            NotificationMessage(
                event_type="system_stopped",
                message="NFT monitor stopped",
                payload={},
            )
        )
        await notification_service.shutdown()
        await _do_shutdown(container, logger)


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
