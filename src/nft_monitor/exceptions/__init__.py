"""Exceptions subpackage."""

from nft_monitor.exceptions.exceptions import (
    RETRYABLE_ERRORS,
    CapacityExceededError,
    DeliveryError,
    GovernorError,
    MissingRequiredConfigError,
    NetworkError,
    NftMonitorError,
    OperationCancelled,
    ProviderAPIError,
    ProviderDataError,
    ProviderError,
    RateLimitedError,
    UnsupportedChainError,
)

__all__ = [
    "RETRYABLE_ERRORS",
    "CapacityExceededError",
    "DeliveryError",
    "GovernorError",
    "MissingRequiredConfigError",
    "NetworkError",
    "NftMonitorError",
    "OperationCancelled",
    "ProviderAPIError",
    "ProviderDataError",
    "ProviderError",
    "RateLimitedError",
    "UnsupportedChainError",
]
