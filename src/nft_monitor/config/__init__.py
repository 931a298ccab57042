"""Configuration subpackage."""

from nft_monitor.config.config import (
    ApiSettings,
    AppSettings,
    ConsoleNotificationSettings,
    DedupSettings,
    GovernorSettings,
    LoggingSettings,
    PollingSettings,
    Settings,
    TelegramNotificationSettings,
    WatchlistSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "ConsoleNotificationSettings",
    "DedupSettings",
    "GovernorSettings",
    "LoggingSettings",
    "PollingSettings",
    "Settings",
    "TelegramNotificationSettings",
    "WatchlistSettings",
    "get_settings",
]
