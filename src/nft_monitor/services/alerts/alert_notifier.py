# -*- coding: utf-8 -*-
"""Alert sink: hands deduplicated alerts to the notification service."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

import structlog

from nft_monitor.exceptions import DeliveryError
from nft_monitor.notifications.types import NotificationMessage

if TYPE_CHECKING:
    from nft_monitor.models.alert_event import AlertEvent
    from nft_monitor.notifications import NotificationService


@runtime_checkable
class AlertSink(Protocol):
    """Receives alerts that passed deduplication."""

    async def on_alert(self, event: AlertEvent) -> None:
        """Accept an alert for delivery.

        Raises:
            DeliveryError: The alert could not be accepted.
        """
        ...


def to_notification(event: AlertEvent) -> NotificationMessage:
    """Map an alert onto a notification message (event_type is the alert kind)."""
    payload = dict(event.payload)
    payload.setdefault("chain", event.chain)
    payload["target_id"] = event.target_id
    payload["dedup_key"] = event.dedup_key
    return NotificationMessage(
        event_type=event.kind.value,
        title=event.title,
        message=event.message,
        payload=payload,
    )


class NotificationAlertSink:
    """AlertSink backed by NotificationService (queue + console/Telegram channels)."""

    def __init__(
        self,
        notification_service: NotificationService,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._notifications = notification_service
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def on_alert(self, event: AlertEvent) -> None:
        try:
            accepted = self._notifications.notify(to_notification(event))
        except RuntimeError as e:
            raise DeliveryError(str(e), dedup_key=event.dedup_key, cause=e) from e
        if not accepted:
            raise DeliveryError("Notification queue rejected the alert", dedup_key=event.dedup_key)
        self._logger.debug(
            "alert_enqueued",
            alert_id=str(event.id),
            alert_kind=event.kind.value,
            alert_dedup_key=event.dedup_key,
        )
