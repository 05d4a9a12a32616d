"""Tests for the shared HTTP client base."""

from unittest.mock import patch

import httpx
import pytest

from cbgains.services.shared.http_client import HTTPClient, HTTPClientError


@pytest.fixture
def http_client():
    return HTTPClient(base_url="https://api.example.test", headers={"X-Default": "1"})


class TestHTTPClient:
    @patch("httpx.Client")
    def test_merges_default_headers(self, mock_client_class, http_client):
        request = httpx.Request("GET", "https://api.example.test/ping")
        mock_client_class.return_value.request.return_value = httpx.Response(
            200, json={"ok": True}, request=request
        )

        result = http_client.get_json("/ping", headers={"X-Extra": "2"})

        assert result == {"ok": True}
        headers = mock_client_class.return_value.request.call_args.kwargs["headers"]
        assert headers == {"X-Default": "1", "X-Extra": "2"}

    @patch("httpx.Client")
    def test_sends_only_method_url_and_headers(self, mock_client_class, http_client):
        request = httpx.Request("GET", "https://api.example.test/ping")
        mock_client_class.return_value.request.return_value = httpx.Response(
            200, json={}, request=request
        )

        http_client.get("/ping")

        kwargs = mock_client_class.return_value.request.call_args.kwargs
        assert set(kwargs) == {"method", "url", "headers"}

    @patch("httpx.Client")
    def test_status_error_keeps_body(self, mock_client_class, http_client):
        request = httpx.Request("GET", "https://api.example.test/missing")
        mock_client_class.return_value.request.return_value = httpx.Response(
            404, text="not here", request=request
        )

        with pytest.raises(HTTPClientError) as exc_info:
            http_client.get("/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "not here"

    @patch("httpx.Client")
    def test_connection_error_is_not_retried(self, mock_client_class, http_client):
        mock_client_class.return_value.request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(HTTPClientError, match="Connection failed"):
            http_client.get("/ping")

        assert mock_client_class.return_value.request.call_count == 1

    @patch("httpx.Client")
    def test_context_manager_closes_client(self, mock_client_class):
        with HTTPClient(base_url="https://api.example.test") as http_client:
            _ = http_client.client

        mock_client_class.return_value.close.assert_called_once()
        assert http_client._client is None
