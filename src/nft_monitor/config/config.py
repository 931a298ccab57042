# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, GOVERNOR__MAX_CONCURRENT.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str) -> list[str]:
    if not raw or not raw.strip():
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "nft-monitor"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    # Per-target levels (only the 5 standard levels)
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Local outputs
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/nft_monitor.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    # Logfire integration via structlog
    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Configuration for the NFT data providers (Alchemy, OpenSea)."""

    model_config = SettingsConfigDict(extra="ignore")

    alchemy_api_key: Optional[str] = Field(default=None, description="Alchemy API key.")
    opensea_api_key: Optional[str] = Field(default=None, description="OpenSea API key.")
    alchemy_url_template: str = Field(
        default="https://{network}.g.alchemy.com/nft/v2/{api_key}",
        description="Alchemy NFT API base URL; {network} and {api_key} are substituted.",
    )
    opensea_host: str = Field(
        default="https://api.opensea.io/api/v2",
        description="OpenSea API v2 base URL.",
    )
    ipfs_gateway: str = Field(
        default="https://ipfs.io/ipfs/",
        description="Gateway prefix used to rewrite ipfs:// media links.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )
    max_pages: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum pages fetched per wallet holdings snapshot.",
    )


class GovernorSettings(BaseSettings):
    """Outbound request governor: token bucket, concurrency ceiling and backoff."""

    model_config = SettingsConfigDict(extra="ignore")

    tokens_per_interval: int = Field(default=60, ge=1, description="Tokens added per refill.")
    interval_ms: int = Field(default=60_000, ge=1, description="Refill cadence in milliseconds.")
    bucket_capacity: int = Field(default=60, ge=1, description="Maximum tokens held.")
    max_concurrent: int = Field(default=5, ge=1, le=256, description="Maximum in-flight requests.")
    max_retries: int = Field(default=5, ge=0, le=20, description="Retries after the first attempt.")
    min_delay_ms: int = Field(default=500, ge=0, description="Base backoff delay in milliseconds.")
    max_delay_ms: int = Field(default=10_000, ge=0, description="Backoff delay ceiling in milliseconds.")
    backoff_factor: float = Field(default=2.0, ge=1.0, le=10.0)
    rate_limited_min_delay_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Base backoff delay used for 429 responses (None = min_delay_ms).",
    )
    jitter: bool = True

    @model_validator(mode="after")
    def _check_delays(self) -> GovernorSettings:
        if self.max_delay_ms < self.min_delay_ms:
            raise ValueError("max_delay_ms must be >= min_delay_ms")
        return self


class PollingSettings(BaseSettings):
    """Polling cadence per watch kind."""

    model_config = SettingsConfigDict(extra="ignore")

    supply_poll_interval_ms: int = Field(
        default=30_000,
        ge=100,
        description="Interval between supply-watch ticks in milliseconds.",
    )
    holding_poll_interval_ms: int = Field(
        default=60_000,
        ge=100,
        description="Interval between holding-watch ticks in milliseconds.",
    )
    run_on_start: bool = Field(
        default=True,
        description="Run the first tick immediately instead of after one interval.",
    )


class DedupSettings(BaseSettings):
    """Alert deduplication window."""

    model_config = SettingsConfigDict(extra="ignore")

    dedup_ttl_ms: int = Field(default=600_000, ge=1, description="Suppression window in milliseconds.")
    max_entries: int = Field(default=10_000, ge=1, description="Upper bound on remembered keys.")


class WatchlistSettings(BaseSettings):
    """Tracked targets store and startup seeding (from env WATCHLIST__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    store_path: Optional[str] = Field(
        default=None,
        description="JSON file holding tracked targets. None keeps targets in memory only.",
    )
    # Raw strings from env so pydantic-settings does not try to JSON-decode them.
    holding_wallets_raw: str = Field(
        default="",
        description="Wallet addresses to watch, comma-separated. Env: WATCHLIST__HOLDING_WALLETS.",
        validation_alias="holding_wallets",
    )
    default_chains_raw: str = Field(
        default="ethereum",
        description="Chains used when a target declares none. Env: WATCHLIST__DEFAULT_CHAINS.",
        validation_alias="default_chains",
    )

    @computed_field
    @property
    def holding_wallets(self) -> list[str]:
        """Parse comma-separated holding_wallets_raw into list of stripped strings."""
        return _split_csv(self.holding_wallets_raw)

    @computed_field
    @property
    def default_chains(self) -> list[str]:
        """Parse comma-separated default_chains_raw; falls back to ethereum."""
        return [c.lower() for c in _split_csv(self.default_chains_raw)] or ["ethereum"]


class TelegramNotificationSettings(BaseSettings):
    """Telegram notifications (from env TELEGRAM__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    api_key: Optional[str] = Field(default=None, description="Telegram bot API key.")
    chat_id: Optional[str] = Field(default=None, description="Telegram chat ID.")
    messages_per_minute: int = Field(default=30, ge=1, le=120)
    max_retries: int = Field(default=5, ge=0, le=20)
    backoff_base_seconds: float = Field(default=1.0, ge=0.1, le=60.0)
    queue_size: int = Field(default=200, ge=1, le=5000)
    connect_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    read_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    write_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    pool_timeout: float = Field(default=10.0, ge=0.1, le=60.0)


class ConsoleNotificationSettings(BaseSettings):
    """Console notification settings."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, GOVERNOR__MAX_RETRIES.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    governor: GovernorSettings = Field(default_factory=GovernorSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    dedup: DedupSettings = Field(default_factory=DedupSettings)
    watchlist: WatchlistSettings = Field(default_factory=WatchlistSettings)
    telegram: TelegramNotificationSettings = Field(default_factory=TelegramNotificationSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(governor={"max_concurrent": 2})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from nft_monitor.config import get_settings

        settings = get_settings()
        capacity = settings.governor.bucket_capacity
    """
    return Settings()
