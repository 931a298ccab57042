"""Repositories: interfaces and implementations."""

from nft_monitor.persistence.repositories.in_memory import (
    InMemoryBaselineRepository,
    InMemoryTargetRepository,
)
from nft_monitor.persistence.repositories.interfaces import (
    IBaselineRepository,
    ITargetRepository,
)
from nft_monitor.persistence.repositories.json_file import JsonFileTargetRepository

__all__ = [
    "IBaselineRepository",
    "ITargetRepository",
    "InMemoryBaselineRepository",
    "InMemoryTargetRepository",
    "JsonFileTargetRepository",
]
