"""Validation and parsing helpers for addresses, counts and media links."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from nft_monitor.exceptions import ProviderDataError


def is_hex_address(addr: Any) -> bool:
    """Return True if addr is a valid 0x address (42 chars)."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if len(s) != 42:
        return False
    if not s.startswith("0x"):
        return False
    try:
        int(s[2:], 16)
        return True
    except ValueError:
        return False


def mask_address(addr: str | None) -> str:
    """Return a masked wallet address for logging (e.g. 0x1234...abcd)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:6]}...{addr[-4:]}"


def parse_count(value: Any, *, field: str = "count") -> int:
    """Parse a remote count field as a non-negative integer.

    Accepts ints, integral floats and digit strings. Anything else (None,
    booleans, fractions, negatives, garbage) is a ProviderDataError: a missing
    count must never be read as zero.
    """
    if value is None or isinstance(value, bool):
        raise ProviderDataError(f"{field} is missing")
    if isinstance(value, int):
        result = value
    else:
        try:
            dec = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ProviderDataError(f"{field} is not a number: {value!r}", cause=e) from e
        if not dec.is_finite() or dec != dec.to_integral_value():
            raise ProviderDataError(f"{field} is not an integer: {value!r}")
        result = int(dec)
    if result < 0:
        raise ProviderDataError(f"{field} is negative: {value!r}")
    return result


def parse_decimal(value: Any) -> Decimal | None:
    """Best-effort Decimal for auxiliary metrics (floor price). None when absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        dec = Decimal(str(value))
    except InvalidOperation:
        return None
    return dec if dec.is_finite() else None


def resolve_ipfs(uri: str | None, gateway: str = "https://ipfs.io/ipfs/") -> str | None:
    """Rewrite ipfs:// URIs to an HTTP gateway link; other URIs pass through."""
    if not uri:
        return None
    if uri.startswith("ipfs://"):
        path = uri[len("ipfs://"):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return f"{gateway.rstrip('/')}/{path}"
    return uri
