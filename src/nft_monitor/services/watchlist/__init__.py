from nft_monitor.services.watchlist.watchlist_service import CheckResult, WatchlistService

__all__ = ["CheckResult", "WatchlistService"]
