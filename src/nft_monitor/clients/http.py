# -*- coding: utf-8 -*-
"""Async HTTP client: failures mapped onto the provider error taxonomy.

Each request is one governed operation: it takes a token and a concurrency
slot from the RequestGovernor, and only that request is retried.
"""

from __future__ import annotations

import asyncio
import uuid
import aiohttp
import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from nft_monitor.config import Settings
from nft_monitor.exceptions import (
    NetworkError,
    ProviderAPIError,
    ProviderDataError,
    RateLimitedError,
)

if TYPE_CHECKING:
    from nft_monitor.governor import RequestGovernor


def _parse_retry_after(header: Optional[str]) -> Optional[float]:
    if not header:
        return None
    try:
        return float(header)
    except ValueError:
        return None


class AsyncHttpClient:
    """Async HTTP client for the NFT data providers.

    Injects Settings, the RequestGovernor and optionally an aiohttp.ClientSession.
    If no session is provided, one is created and must be closed via aclose()
    or used as an async context manager. Without a governor every call is a
    single unthrottled attempt.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        governor: Optional[RequestGovernor] = None,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration (uses settings.api.timeout_seconds).
            governor: Rate, concurrency and retry policy applied to each request.
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session (call aclose() when done).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._governor = governor
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    def _redact(self, url: str) -> str:
        """Strip the Alchemy key (carried in the URL path) before logging or raising."""
        key = self._settings.api.alchemy_api_key
        return url.replace(key, "***") if key else url

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Any:
        """Perform a GET request through the governor and return parsed JSON.

        Raises:
            RateLimitedError: HTTP 429 (retry_after from the Retry-After header).
            NetworkError: Connection failure, timeout or 5xx.
            ProviderAPIError: Any other non-2xx status.
            ProviderDataError: Body is not JSON.
            OperationCancelled: cancel fired while waiting for a token, a slot or a retry.
        """
        if self._governor is None:
            return await self._request("GET", url, params=params, headers=headers)
        return await self._governor.execute(
            lambda: self._request("GET", url, params=params, headers=headers),
            cancel=cancel,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        request_id = uuid.uuid4().hex[:12]
        safe_url = self._redact(url)
        with bound_contextvars(
            http_method=method,
            http_url=safe_url,
            http_request_id=request_id,
        ):
            try:
                session = await self._get_session()
                async with session.request(
                    method,
                    url,
                    params=params,
                    headers={"Accept": "application/json", **(headers or {})},
                ) as response:
                    if response.status == 429:
                        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                        self._logger.warning(
                            "http_rate_limited",
                            http_status_code=429,
                            http_retry_after_seconds=retry_after,
                        )
                        raise RateLimitedError(url=safe_url, retry_after=retry_after)
                    if response.status >= 500:
                        raise NetworkError(
                            f"{method} {safe_url} -> {response.status}",
                            url=safe_url,
                            status_code=response.status,
                        )
                    if response.status >= 400:
                        body = await response.text()
                        self._logger.warning(
                            "http_client_error",
                            http_status_code=response.status,
                            http_body=body[:200],
                        )
                        raise ProviderAPIError(
                            f"{method} {safe_url} -> {response.status}",
                            url=safe_url,
                            status_code=response.status,
                        )
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise ProviderDataError(
                            f"{method} {safe_url} returned a non-JSON body",
                            url=safe_url,
                            status_code=response.status,
                            cause=e,
                        ) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self._logger.debug(
                    "http_request_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise NetworkError(
                    f"{method} {safe_url} failed: {type(e).__name__}",
                    url=safe_url,
                    cause=e,
                ) from e
