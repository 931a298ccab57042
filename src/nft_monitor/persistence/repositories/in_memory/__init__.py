"""In-memory repository implementations."""

from nft_monitor.persistence.repositories.in_memory.baseline_repository import (
    InMemoryBaselineRepository,
)
from nft_monitor.persistence.repositories.in_memory.target_repository import (
    InMemoryTargetRepository,
)

__all__ = ["InMemoryBaselineRepository", "InMemoryTargetRepository"]
