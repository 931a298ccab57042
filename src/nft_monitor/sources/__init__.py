"""Snapshot sources."""

from nft_monitor.sources.base import SnapshotSource
from nft_monitor.sources.provider_snapshot_source import ProviderSnapshotSource

__all__ = ["ProviderSnapshotSource", "SnapshotSource"]
