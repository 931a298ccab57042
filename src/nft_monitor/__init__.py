"""NFT supply and wallet-holdings monitor."""

__version__ = "0.1.0"
