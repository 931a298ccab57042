"""Persistence layer (repositories, etc.)."""

from nft_monitor.persistence.repositories import (
    IBaselineRepository,
    InMemoryBaselineRepository,
    InMemoryTargetRepository,
    ITargetRepository,
    JsonFileTargetRepository,
)

__all__ = [
    "IBaselineRepository",
    "ITargetRepository",
    "InMemoryBaselineRepository",
    "InMemoryTargetRepository",
    "JsonFileTargetRepository",
]
