"""Coinbase holdings and profit/loss reporting."""

__version__ = "0.1.0"
