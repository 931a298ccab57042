"""Repository interfaces."""

from nft_monitor.persistence.repositories.interfaces.baseline_repository import (
    IBaselineRepository,
)
from nft_monitor.persistence.repositories.interfaces.target_repository import (
    ITargetRepository,
)

__all__ = ["IBaselineRepository", "ITargetRepository"]
