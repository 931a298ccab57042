# -*- coding: utf-8 -*-
"""Utility modules."""

from nft_monitor.utils.chains import SUPPORTED_CHAINS, ChainInfo, get_chain
from nft_monitor.utils.validation import (
    is_hex_address,
    mask_address,
    parse_count,
    parse_decimal,
    resolve_ipfs,
)

__all__ = [
    "SUPPORTED_CHAINS",
    "ChainInfo",
    "get_chain",
    "is_hex_address",
    "mask_address",
    "parse_count",
    "parse_decimal",
    "resolve_ipfs",
]
