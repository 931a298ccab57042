from nft_monitor.DI.container import Container

__all__ = ["Container"]
