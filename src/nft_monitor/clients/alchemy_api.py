# -*- coding: utf-8 -*-
"""Alchemy NFT API v2 client (wallet holdings, contract metadata)."""

from __future__ import annotations

import asyncio
import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, cast
from structlog.contextvars import bound_contextvars

from nft_monitor.config import Settings
from nft_monitor.exceptions import MissingRequiredConfigError, ProviderDataError
from nft_monitor.utils.chains import get_chain
from nft_monitor.utils.validation import mask_address

if TYPE_CHECKING:
    from .http import AsyncHttpClient


class AlchemyNftClient:
    """Client for the Alchemy NFT API (getNFTs, getContractMetadata)."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.api.alchemy_*).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def enabled(self) -> bool:
        return bool(self._settings.api.alchemy_api_key)

    def _base_url(self, chain: str) -> str:
        api = self._settings.api
        if not api.alchemy_api_key:
            raise MissingRequiredConfigError("API__ALCHEMY_API_KEY")
        network = get_chain(chain).alchemy_network
        return api.alchemy_url_template.format(network=network, api_key=api.alchemy_api_key).rstrip("/")

    async def get_nfts_for_owner(
        self,
        owner: str,
        chain: str,
        *,
        max_pages: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> List[Dict[str, Any]]:
        """Return every NFT owned by a wallet on one chain, following pageKey.

        Args:
            owner: Wallet address (0x...).
            chain: Chain label (ethereum, polygon, ...).
            max_pages: Page limit; default from settings.api.max_pages.
            cancel: Shutdown signal forwarded to every page request.

        Returns:
            List of ownedNfts dicts as returned by Alchemy.

        Raises:
            ProviderDataError: The response has no ownedNfts list, or the wallet
                holds more than max_pages pages of NFTs.
        """
        pages = max_pages if max_pages is not None else self._settings.api.max_pages
        url = f"{self._base_url(chain)}/getNFTs"
        owned: List[Dict[str, Any]] = []
        page_key: Optional[str] = None
        with bound_contextvars(alchemy_owner_masked=mask_address(owner), alchemy_chain=chain):
            for page in range(pages):
                params: Dict[str, Any] = {"owner": owner, "withMetadata": "true"}
                if page_key:
                    params["pageKey"] = page_key
                data = await self._http.get(url, params=params, cancel=cancel)
                if not isinstance(data, dict) or not isinstance(data.get("ownedNfts"), list):
                    raise ProviderDataError("getNFTs response has no ownedNfts list", url=None)
                body = cast(Dict[str, Any], data)
                owned.extend(x for x in cast(List[Any], body["ownedNfts"]) if isinstance(x, dict))
                page_key = body.get("pageKey") or None
                if not page_key:
                    break
            else:
                if page_key:
                    # A partial list would make items outside the window look new.
                    self._logger.warning(
                        "alchemy_get_nfts_truncated",
                        alchemy_pages=pages,
                        alchemy_owned_count=len(owned),
                    )
                    raise ProviderDataError(
                        f"getNFTs returned more than {pages} pages; holdings are incomplete"
                    )
        return owned

    async def get_contract_total_supply(
        self,
        contract: str,
        chain: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Any:
        """Return the raw contractMetadata.totalSupply field (may be None or a string)."""
        url = f"{self._base_url(chain)}/getContractMetadata"
        data = await self._http.get(url, params={"contractAddress": contract}, cancel=cancel)
        if not isinstance(data, dict):
            raise ProviderDataError("getContractMetadata response is not an object")
        meta = cast(Dict[str, Any], data).get("contractMetadata") or {}
        return cast(Dict[str, Any], meta).get("totalSupply") if isinstance(meta, dict) else None

