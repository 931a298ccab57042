"""JSON-file repository implementations."""

from nft_monitor.persistence.repositories.json_file.target_repository import (
    JsonFileTargetRepository,
)

__all__ = ["JsonFileTargetRepository"]
