"""HTTP and API clients."""

from nft_monitor.clients.alchemy_api import AlchemyNftClient
from nft_monitor.clients.http import AsyncHttpClient
from nft_monitor.clients.opensea_api import OpenSeaClient

__all__ = [
    "AlchemyNftClient",
    "AsyncHttpClient",
    "OpenSeaClient",
]
