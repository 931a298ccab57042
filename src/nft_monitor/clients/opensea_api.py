# -*- coding: utf-8 -*-
"""OpenSea API v2 client (collection stats and metadata)."""

from __future__ import annotations

import asyncio
import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, cast

from nft_monitor.config import Settings
from nft_monitor.exceptions import ProviderAPIError
from nft_monitor.utils.chains import get_chain

if TYPE_CHECKING:
    from .http import AsyncHttpClient


class OpenSeaClient:
    """Client for OpenSea collection endpoints. Requires an API key."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def enabled(self) -> bool:
        return bool(self._settings.api.opensea_api_key)

    def _base_url(self) -> str:
        return self._settings.api.opensea_host.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        key = self._settings.api.opensea_api_key
        return {"x-api-key": key} if key else {}

    async def _get_object(self, url: str, cancel: Optional[asyncio.Event]) -> Dict[str, Any]:
        data = await self._http.get(url, headers=self._headers(), cancel=cancel)
        return cast(Dict[str, Any], data) if isinstance(data, dict) else {}

    async def get_collection_slug(
        self,
        contract: str,
        chain: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        """Resolve a contract address to its collection slug (None when OpenSea does not know it)."""
        url = f"{self._base_url()}/chain/{get_chain(chain).opensea_chain}/contract/{contract}"
        try:
            data = await self._get_object(url, cancel)
        except ProviderAPIError as e:
            if e.status_code == 404:
                return None
            raise
        slug = data.get("collection")
        if isinstance(slug, dict):
            slug = cast(Dict[str, Any], slug).get("slug")
        return slug if isinstance(slug, str) and slug else None

    async def get_collection_stats(
        self,
        slug: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """Return the "total" block of /collections/{slug}/stats ({} when absent)."""
        data = await self._get_object(f"{self._base_url()}/collections/{slug}/stats", cancel)
        total = data.get("total")
        return cast(Dict[str, Any], total) if isinstance(total, dict) else {}

    async def get_collection(
        self,
        slug: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """Return collection metadata (image_url, opensea_url, project_url, ...)."""
        return await self._get_object(f"{self._base_url()}/collections/{slug}", cancel)
