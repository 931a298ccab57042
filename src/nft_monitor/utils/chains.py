"""Chains served by the data providers."""

from __future__ import annotations

from dataclasses import dataclass

from nft_monitor.exceptions import UnsupportedChainError


@dataclass(frozen=True, slots=True)
class ChainInfo:
    name: str
    chain_id: int
    alchemy_network: str
    opensea_chain: str


SUPPORTED_CHAINS: dict[str, ChainInfo] = {
    "ethereum": ChainInfo("ethereum", 1, "eth-mainnet", "ethereum"),
    "polygon": ChainInfo("polygon", 137, "polygon-mainnet", "matic"),
    "arbitrum": ChainInfo("arbitrum", 42161, "arb-mainnet", "arbitrum"),
    "optimism": ChainInfo("optimism", 10, "opt-mainnet", "optimism"),
    "base": ChainInfo("base", 8453, "base-mainnet", "base"),
}


def get_chain(name: str) -> ChainInfo:
    """Return chain info for a label (case-insensitive)."""
    info = SUPPORTED_CHAINS.get((name or "").strip().lower())
    if info is None:
        raise UnsupportedChainError(name)
    return info
