# -*- coding: utf-8 -*-
"""Console notifier (print-based)."""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

from nft_monitor.notifications.types import NotificationMessage
from nft_monitor.notifications.strategies.base import BaseNotificationStrategy
from nft_monitor.config import Settings

if TYPE_CHECKING:  # pragma: no cover
    from nft_monitor.notifications.types import NotificationStyler

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Drop Telegram HTML tags and unescape entities for terminal output."""
    return html.unescape(_TAG_RE.sub("", text))


class ConsoleNotifier(BaseNotificationStrategy):
    """Print notifications to stdout."""

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler"
    ) -> None:
        super().__init__(settings)
        self._running = False
        self._styler = styler

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    async def send_notification(self, message: NotificationMessage) -> None:
        """Send a notification to the console."""
        if not self.is_running or not self.settings.console.enabled:
            return
        body = self._styler.render(message) if self._styler else message.message
        print(strip_html(body))
