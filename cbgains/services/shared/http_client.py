"""Base HTTP client with timeouts and error handling.

API clients inherit from this class to get consistent behavior for
timeouts, status handling and error wrapping. Requests are never retried:
a failed request surfaces immediately to the caller.
"""

import logging
from typing import Any, Self

import httpx

logger = logging.getLogger(__name__)


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class HTTPClient:
    """Base HTTP client with timeouts and error handling.

    Example usage:
        class CoinbaseClient(HTTPClient):
            def __init__(self, credentials):
                super().__init__(base_url="https://api.coinbase.com", timeout=30.0)

            def get_spot(self) -> dict:
                return self.get_json("/v2/prices/USD/spot")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.default_headers = headers or {}
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url or "",
                timeout=self.timeout,
                headers=self.default_headers,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _request(self, method: str, url: str, headers: dict | None = None) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method
            url: URL path (joined with base_url if set)
            headers: Additional headers to merge with defaults

        Returns:
            httpx.Response object

        Raises:
            HTTPClientError: On HTTP errors, timeouts, or connection failures
        """
        merged_headers = {**self.default_headers, **(headers or {})}

        try:
            response = self.client.request(method=method, url=url, headers=merged_headers)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"HTTP {e.response.status_code} for {method} {url}: {e.response.text[:200]}"
            )
            raise HTTPClientError(
                message=f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                status_code=e.response.status_code,
                response_body=e.response.text,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout for {method} {url}")
            raise HTTPClientError(f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Connection error for {method} {url}: {e}")
            raise HTTPClientError(f"Connection failed: {url}") from e

    def get(self, url: str, headers: dict | None = None) -> httpx.Response:
        """HTTP GET request."""
        return self._request("GET", url, headers=headers)

    def get_json(self, url: str, headers: dict | None = None) -> Any:
        """HTTP GET returning parsed JSON."""
        response = self.get(url, headers=headers)
        return response.json()
