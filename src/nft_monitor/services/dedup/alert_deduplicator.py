# -*- coding: utf-8 -*-
"""Time-bounded alert suppression keyed by dedup key."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog
from cachetools import TTLCache

# TTLCache drops an entry once timer() reaches set_time + ttl, so the cache keeps
# entries slightly longer and should_emit compares timestamps itself.
_EXPIRY_SLACK_SECONDS = 1.0

if TYPE_CHECKING:
    from nft_monitor.config import Settings


class AlertDeduplicator:
    """Suppresses repeats of the same dedup key within ttl seconds.

    A key is emitted again only once it was last recorded more than ttl seconds
    ago. The cache is bounded by maxsize and evicts expired keys on access.
    """

    def __init__(
        self,
        ttl_seconds: float = 600.0,
        maxsize: int = 10_000,
        *,
        timer: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self._ttl = ttl_seconds
        self._seen: TTLCache[str, float] = TTLCache(
            maxsize=maxsize,
            ttl=ttl_seconds + _EXPIRY_SLACK_SECONDS,
            timer=timer,
        )
        self._timer = timer
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> AlertDeduplicator:
        d = settings.dedup
        return cls(d.dedup_ttl_ms / 1000.0, d.max_entries, **kwargs)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def should_emit(self, dedup_key: str) -> bool:
        """Return True and record the key if it was not seen within the TTL."""
        now = self._timer()
        seen_at = self._seen.get(dedup_key)
        if seen_at is not None and now - seen_at <= self._ttl:
            self._logger.debug("alert_suppressed", alert_dedup_key=dedup_key)
            return False
        self._seen[dedup_key] = now
        return True

    def forget(self, dedup_key: str) -> None:
        """Drop a key so the next occurrence is emitted."""
        self._seen.pop(dedup_key, None)

    def __len__(self) -> int:
        self._seen.expire()
        return len(self._seen)
