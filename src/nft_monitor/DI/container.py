# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from nft_monitor.config import Settings, get_settings
from nft_monitor.clients.alchemy_api import AlchemyNftClient
from nft_monitor.clients.http import AsyncHttpClient
from nft_monitor.clients.opensea_api import OpenSeaClient
from nft_monitor.governor import RequestGovernor
from nft_monitor.notifications.notification_manager import NotificationService
from nft_monitor.notifications.strategies.base import BaseNotificationStrategy
from nft_monitor.notifications.strategies.console import ConsoleNotifier
from nft_monitor.notifications.strategies.telegram import TelegramNotifier
from nft_monitor.notifications.stylers.notification_styler import EventNotificationStyler
from nft_monitor.persistence.repositories import (
    InMemoryBaselineRepository,
    InMemoryTargetRepository,
    ITargetRepository,
    JsonFileTargetRepository,
)
from nft_monitor.services.alerts import NotificationAlertSink
from nft_monitor.services.dedup import AlertDeduplicator
from nft_monitor.services.polling import PollingRunner, StateDiffPoller
from nft_monitor.services.watchlist import WatchlistService
from nft_monitor.sources import ProviderSnapshotSource


def _build_target_repository(settings: Settings) -> ITargetRepository:
    """JSON file store when WATCHLIST__STORE_PATH is set, in-memory otherwise."""
    path = settings.watchlist.store_path
    if path:
        return JsonFileTargetRepository(path)
    return InMemoryTargetRepository()


def _build_notification_notifiers(
    settings: Settings,
    styler: EventNotificationStyler,
) -> list[BaseNotificationStrategy]:
    notifiers: list[BaseNotificationStrategy] = []
    if settings.console.enabled:
        notifiers.append(ConsoleNotifier(settings=settings, styler=styler))
    if settings.telegram.enabled:
        notifiers.append(TelegramNotifier(settings=settings, styler=styler))
    return notifiers


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, clients, governor, repositories, poller, runner."""

    config = providers.Callable(get_settings)

    governor = providers.Singleton(RequestGovernor.from_settings, config)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
        governor=governor,
    )

    alchemy_client = providers.Singleton(
        AlchemyNftClient,
        http_client=http_client,
        settings=config,
    )

    opensea_client = providers.Singleton(
        OpenSeaClient,
        http_client=http_client,
        settings=config,
    )

    snapshot_source = providers.Singleton(
        ProviderSnapshotSource,
        alchemy=alchemy_client,
        opensea=opensea_client,
        settings=config,
    )

    target_repository = providers.Singleton(_build_target_repository, config)

    baseline_repository = providers.Singleton(InMemoryBaselineRepository)

    deduplicator = providers.Singleton(AlertDeduplicator.from_settings, config)

    notification_styler = providers.Singleton(EventNotificationStyler)

    notification_service = providers.Singleton(
        NotificationService,
        notifiers=providers.Callable(_build_notification_notifiers, config, notification_styler),
    )

    alert_sink = providers.Singleton(
        NotificationAlertSink,
        notification_service=notification_service,
    )

    poller = providers.Singleton(
        StateDiffPoller,
        target_repository=target_repository,
        baseline_repository=baseline_repository,
        snapshot_source=snapshot_source,
        deduplicator=deduplicator,
        alert_sink=alert_sink,
    )

    polling_runner = providers.Singleton(
        PollingRunner,
        poller=poller,
        settings=config,
    )

    watchlist_service = providers.Singleton(
        WatchlistService,
        target_repository=target_repository,
        baseline_repository=baseline_repository,
        poller=poller,
        snapshot_source=snapshot_source,
        settings=config,
    )
