"""Coinbase exchange integration."""

from .client import (
    Account,
    CoinbaseAPIError,
    CoinbaseClient,
    CoinbaseCredentials,
    CoinbaseParseError,
)

__all__ = [
    "Account",
    "CoinbaseAPIError",
    "CoinbaseClient",
    "CoinbaseCredentials",
    "CoinbaseParseError",
]
