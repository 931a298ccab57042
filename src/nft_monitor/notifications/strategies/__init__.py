"""Notification strategies."""

from nft_monitor.notifications.strategies.base import (
    BaseNotificationStrategy,
)
from nft_monitor.notifications.strategies.console import ConsoleNotifier
from nft_monitor.notifications.strategies.telegram import TelegramNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "TelegramNotifier",
]
