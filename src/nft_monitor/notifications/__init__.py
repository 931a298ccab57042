"""Notification subsystem."""

from nft_monitor.notifications.notification_manager import (
    NotificationService,
)
from nft_monitor.notifications.strategies import (
    BaseNotificationStrategy,
    ConsoleNotifier,
    TelegramNotifier,
)
from nft_monitor.notifications.stylers.notification_styler import EventNotificationStyler
from nft_monitor.notifications.types import (
    NotificationMessage,
    NotificationStyler,
)

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "EventNotificationStyler",
    "TelegramNotifier",
    "NotificationMessage",
    "NotificationService",
    "NotificationStyler",
]
