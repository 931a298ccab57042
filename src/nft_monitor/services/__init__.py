"""Application services: polling engine, deduplication, alert delivery, watchlist."""
