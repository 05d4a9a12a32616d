"""Shared utilities for API clients."""

from .http_client import HTTPClient, HTTPClientError

__all__ = ["HTTPClient", "HTTPClientError"]
