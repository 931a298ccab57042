# -*- coding: utf-8 -*-
"""Telegram notification strategy (async)."""

from __future__ import annotations

import asyncio
import time
import structlog
from collections.abc import Awaitable
from typing import Any, Callable, Optional, TYPE_CHECKING

from telegram import Bot
from telegram.error import (
    BadRequest,
    Forbidden,
    NetworkError,
    RetryAfter,
    TelegramError,
    TimedOut,
)
from telegram.request import HTTPXRequest

from nft_monitor.notifications.types import NotificationMessage
from nft_monitor.notifications.strategies.base import BaseNotificationStrategy

if TYPE_CHECKING:
    from nft_monitor.config.config import Settings
    from nft_monitor.notifications.types import NotificationStyler

# Telegram limit for photo captions
CAPTION_LIMIT = 1024


class TelegramNotifier(BaseNotificationStrategy):
    """Send notifications to Telegram using python-telegram-bot.

    Alerts carrying an image_url are sent as a photo with the rendered text as
    caption; anything else (or a caption over the limit) goes out as a plain
    HTML message.
    """

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler",
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        super().__init__(settings)
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._styler: "NotificationStyler" = styler

        cfg = self.settings.telegram
        token = cfg.api_key
        chat_id = cfg.chat_id
        if not cfg.enabled or not token or not chat_id:
            raise ValueError("TelegramNotifier requires token and chat_id.")

        self.token: str = str(token)
        self.chat_id: str = str(chat_id)
        self.messages_per_minute = cfg.messages_per_minute
        self.max_retries = cfg.max_retries
        self.backoff_base_seconds = cfg.backoff_base_seconds

        self.connect_timeout = cfg.connect_timeout
        self.read_timeout = cfg.read_timeout
        self.write_timeout = cfg.write_timeout
        self.pool_timeout = cfg.pool_timeout

        self._bot: Optional[Bot] = None
        self._running = False
        self._message_timestamps: list[float] = []

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        if self._running:
            self._logger.warning("telegram_already_running")
            return
        request = HTTPXRequest(
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            write_timeout=self.write_timeout,
            pool_timeout=self.pool_timeout,
        )
        self._bot = Bot(token=self.token, request=request)
        self._running = True

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._bot = None
        self._running = False

    async def send_notification(self, message: NotificationMessage) -> None:
        if not self._running or self._bot is None:
            self._logger.warning("telegram_not_running_cannot_send")
            return

        formatted = self._styler.render(message)
        bot = self._bot
        image_url = (message.payload or {}).get("image_url")
        if isinstance(image_url, str) and image_url and len(formatted) <= CAPTION_LIMIT:
            sent = await self._deliver(
                lambda: bot.send_photo(
                    chat_id=self.chat_id,
                    photo=image_url,
                    caption=formatted,
                    parse_mode="HTML",
                ),
            )
            if sent:
                return
            self._logger.debug("telegram_photo_fallback_to_text")

        await self._deliver(
            lambda: bot.send_message(
                chat_id=self.chat_id,
                text=formatted,
                parse_mode="HTML",
                disable_web_page_preview=True,
            ),
        )

    async def _deliver(self, send: Callable[[], Awaitable[Any]]) -> bool:
        """Call send with Telegram-aware retries. Returns False if the message was dropped."""
        await self._apply_rate_limit()
        for attempt in range(1, self.max_retries + 2):
            try:
                await send()
                self._message_timestamps.append(time.monotonic())
                return True
            except RetryAfter as exc:
                retry_after = exc.retry_after
                retry_seconds = (
                    retry_after.total_seconds()
                    if hasattr(retry_after, "total_seconds")
                    else float(retry_after)
                )
                self._logger.warning(
                    "telegram_rate_limit_retry_after",
                    retry_seconds=retry_seconds,
                )
                await asyncio.sleep(retry_seconds)
            except (BadRequest, Forbidden) as exc:
                self._logger.error(
                    "telegram_fatal_error",
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                return False
            except (NetworkError, TimedOut, TelegramError) as exc:
                if attempt > self.max_retries:
                    break
                backoff = min(60.0, self.backoff_base_seconds * (2 ** (attempt - 1)))
                self._logger.warning(
                    "telegram_error_retry",
                    error_type=type(exc).__name__,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)

        self._logger.error("telegram_max_retries_exceeded_message_dropped")
        return False

    async def _apply_rate_limit(self) -> None:
        if self.messages_per_minute <= 0:
            return

        now = time.monotonic()
        window_start = now - 60
        self._message_timestamps = [t for t in self._message_timestamps if t >= window_start]
        if len(self._message_timestamps) >= self.messages_per_minute:
            sleep_time = 60 - (now - self._message_timestamps[0])
            if sleep_time > 0:
                await asyncio.sleep(sleep_time)
