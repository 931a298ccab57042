"""Custom exceptions for provider access, request governing and alert delivery."""

from __future__ import annotations


class NftMonitorError(Exception):
    """Base exception for nft-monitor errors."""

    pass


class MissingRequiredConfigError(NftMonitorError):
    """Raised when a required configuration value is missing."""

    pass


class GovernorError(NftMonitorError):
    """Base exception for failures raised by the request governor itself."""

    pass


class CapacityExceededError(GovernorError):
    """Raised when more tokens are requested than the bucket can ever hold."""

    def __init__(self, requested: int, capacity: int) -> None:
        super().__init__(f"Token request {requested} exceeds bucket capacity {capacity}")
        self.requested = requested
        self.capacity = capacity


class OperationCancelled(GovernorError):
    """Raised when the cancellation signal fires while an operation is waiting."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


class ProviderError(NftMonitorError):
    """Base exception for upstream data provider failures."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class NetworkError(ProviderError):
    """Transient failure: connection error, timeout or 5xx response."""

    pass


class RateLimitedError(NetworkError):
    """Raised when the provider returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class ProviderAPIError(ProviderError):
    """Non-retryable client error from the provider (401, 403, 404, ...)."""

    pass


class ProviderDataError(ProviderError):
    """Raised when a provider response is missing or has malformed snapshot fields."""

    pass


class UnsupportedChainError(ProviderError):
    """Raised when a target declares a chain the provider does not serve."""

    def __init__(self, chain: str) -> None:
        super().__init__(f"Unsupported chain: {chain}")
        self.chain = chain


class DeliveryError(NftMonitorError):
    """Raised when the notifier sink cannot accept an alert."""

    def __init__(
        self,
        message: str,
        *,
        dedup_key: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.dedup_key = dedup_key
        self.cause = cause


RETRYABLE_ERRORS: tuple[type[Exception], ...] = (NetworkError,)
"""Errors the backoff retrier retries (RateLimitedError included). Everything else propagates at once."""
