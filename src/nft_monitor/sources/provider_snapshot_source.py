# -*- coding: utf-8 -*-
"""Snapshot source backed by Alchemy (holdings, supply fallback) and OpenSea (collection stats)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Optional, cast

import structlog

from nft_monitor.clients.alchemy_api import AlchemyNftClient
from nft_monitor.clients.opensea_api import OpenSeaClient
from nft_monitor.config import Settings
from nft_monitor.exceptions import ProviderDataError, ProviderError
from nft_monitor.models.snapshot import HoldingItem, HoldingSnapshot, Snapshot, SupplySnapshot
from nft_monitor.models.target import Target, TargetKind
from nft_monitor.utils.chains import get_chain
from nft_monitor.utils.validation import (
    is_hex_address,
    mask_address,
    parse_count,
    parse_decimal,
    resolve_ipfs,
)


def _normalize_token_id(raw: Any) -> str | None:
    """Token ids come as decimal or 0x-hex strings; keys use the decimal form."""
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    if s.lower().startswith("0x"):
        try:
            return str(int(s, 16))
        except ValueError:
            return None
    return s


def _floor_price(total: dict[str, Any]) -> Any:
    floor = total.get("floor_price")
    if isinstance(floor, dict):
        return cast(dict[str, Any], floor).get("value")
    return floor


class ProviderSnapshotSource:
    """Builds HoldingSnapshot / SupplySnapshot from provider responses."""

    def __init__(
        self,
        alchemy: AlchemyNftClient,
        opensea: OpenSeaClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the source.

        Args:
            alchemy: Alchemy NFT client (holdings, contract metadata).
            opensea: OpenSea client (collection stats and metadata).
            settings: Application settings (uses settings.api.ipfs_gateway).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._alchemy = alchemy
        self._opensea = opensea
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def fetch_snapshot(
        self,
        target: Target,
        chain: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Snapshot:
        get_chain(chain)
        if target.kind is TargetKind.HOLDING_WATCH:
            return await self.fetch_holdings(target, chain, cancel=cancel)
        return await self.fetch_supply(target, chain, cancel=cancel)

    # -------------------------------------------------------------------------
    # holding-watch
    # -------------------------------------------------------------------------

    async def fetch_holdings(
        self,
        target: Target,
        chain: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> HoldingSnapshot:
        owned = await self._alchemy.get_nfts_for_owner(target.locator, chain, cancel=cancel)
        items: list[HoldingItem] = []
        skipped = 0
        for nft in owned:
            item = self._holding_item(nft)
            if item is None:
                skipped += 1
                continue
            items.append(item)
        if skipped:
            self._logger.debug(
                "holdings_entries_skipped",
                target_id=target.id,
                wallet_masked=mask_address(target.locator),
                chain=chain,
                skipped_count=skipped,
            )
        return HoldingSnapshot.create(target.id, chain, items)

    def _holding_item(self, nft: dict[str, Any]) -> HoldingItem | None:
        contract_raw = nft.get("contract")
        contract = (
            cast(dict[str, Any], contract_raw).get("address")
            if isinstance(contract_raw, dict)
            else nft.get("contractAddress")
        )
        id_raw = nft.get("id")
        token_raw = nft.get("tokenId")
        if token_raw is None and isinstance(id_raw, dict):
            token_raw = cast(dict[str, Any], id_raw).get("tokenId")
        if token_raw is None:
            token_raw = nft.get("token_id")
        token_id = _normalize_token_id(token_raw)
        if not isinstance(contract, str) or not contract.strip() or token_id is None:
            return None

        metadata = nft.get("metadata") if isinstance(nft.get("metadata"), dict) else {}
        metadata = cast(dict[str, Any], metadata)
        media = nft.get("media")
        image: Any = None
        if isinstance(media, list) and media and isinstance(media[0], dict):
            image = cast(dict[str, Any], media[0]).get("gateway")
        image = image or metadata.get("image") or nft.get("image_url")
        name = nft.get("title") or metadata.get("name")
        return HoldingItem.create(
            contract,
            token_id,
            name=str(name) if name else None,
            image_url=resolve_ipfs(image, self._settings.api.ipfs_gateway) if isinstance(image, str) else None,
        )

    # -------------------------------------------------------------------------
    # supply-watch
    # -------------------------------------------------------------------------

    async def fetch_supply(
        self,
        target: Target,
        chain: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> SupplySnapshot:
        locator = target.locator
        is_address = is_hex_address(locator)

        if self._opensea.enabled:
            slug = (
                await self._opensea.get_collection_slug(locator, chain, cancel=cancel)
                if is_address
                else locator
            )
            if slug:
                snapshot = await self._supply_from_opensea(target, chain, slug, cancel)
                if snapshot is not None:
                    return snapshot

        if is_address and self._alchemy.enabled:
            self._logger.debug(
                "supply_fallback_alchemy",
                target_id=target.id,
                chain=chain,
            )
            raw = await self._alchemy.get_contract_total_supply(locator, chain, cancel=cancel)
            count = parse_count(raw, field="contractMetadata.totalSupply")
            return SupplySnapshot.create(target.id, chain, count)

        raise ProviderDataError(f"No supply data available for {locator} on {chain}")

    async def _supply_from_opensea(
        self,
        target: Target,
        chain: str,
        slug: str,
        cancel: asyncio.Event | None,
    ) -> SupplySnapshot | None:
        total = await self._opensea.get_collection_stats(slug, cancel=cancel)
        raw = total.get("supply", total.get("token_count"))
        if raw is None:
            return None
        count = parse_count(raw, field="total.supply")

        image_url: str | None = None
        marketplace_url: str | None = None
        try:
            meta = await self._opensea.get_collection(slug, cancel=cancel)
            image_url = resolve_ipfs(meta.get("image_url"), self._settings.api.ipfs_gateway)
            marketplace_url = meta.get("opensea_url") or meta.get("project_url") or None
        except ProviderError as e:
            # Display-only fields; the count alone is a valid snapshot.
            self._logger.debug(
                "supply_metadata_unavailable",
                target_id=target.id,
                chain=chain,
                error_type=type(e).__name__,
            )
        return SupplySnapshot.create(
            target.id,
            chain,
            count,
            floor_price=parse_decimal(_floor_price(total)),
            image_url=image_url,
            marketplace_url=marketplace_url,
        )
