from nft_monitor.services.dedup.alert_deduplicator import AlertDeduplicator

__all__ = ["AlertDeduplicator"]
