"""Coinbase API client for fetching account data.

Implements Coinbase's v2 HMAC-SHA256 API key authentication and provides
methods for fetching accounts, transaction history and USD spot rates.
"""

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from cbgains.services.gains.types import SpotRate, Transaction, TransactionKind
from cbgains.services.shared.http_client import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)

COINBASE_API_URL = "https://api.coinbase.com"
COINBASE_API_VERSION = "2016-05-16"

# Spot rates are always quoted against this currency
QUOTE_CURRENCY = "USD"


@dataclass(frozen=True)
class CoinbaseCredentials:
    """Coinbase API key credentials."""

    api_key: str
    api_secret: str


@dataclass(frozen=True)
class Account:
    """A Coinbase wallet account."""

    id: str
    name: str
    currency: str | None = None


class CoinbaseAPIError(Exception):
    """Exception raised for Coinbase API errors."""

    def __init__(
        self, message: str, status_code: int | None = None, errors: list[str] | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class CoinbaseParseError(CoinbaseAPIError):
    """Response body did not have the expected shape or values."""


class CoinbaseClient(HTTPClient):
    """Client for interacting with the Coinbase v2 REST API.

    Usage:
        client = CoinbaseClient(CoinbaseCredentials(api_key="...", api_secret="..."))
        accounts = client.list_accounts()
        transactions = client.list_all_transactions([a.id for a in accounts])
        rates = client.list_spot_rates()
    """

    def __init__(
        self,
        credentials: CoinbaseCredentials,
        base_url: str = COINBASE_API_URL,
        api_version: str = COINBASE_API_VERSION,
        timeout: float = 30.0,
        page_limit: int = 100,
    ):
        """Initialize Coinbase client with credentials.

        Args:
            credentials: Coinbase API key and secret
            base_url: API root URL
            api_version: Value sent in the CB-VERSION header
            timeout: Request timeout in seconds
            page_limit: Page size for paginated list endpoints
        """
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "CB-VERSION": api_version,
            },
        )
        self.api_key = credentials.api_key
        self.api_secret = credentials.api_secret
        self.page_limit = page_limit

    def _get_timestamp(self) -> str:
        """Get current unix timestamp in seconds."""
        return str(int(time.time()))

    def _generate_signature(self, timestamp: str, method: str, path: str, body: str = "") -> str:
        """Generate HMAC-SHA256 signature for request.

        Signature = hex(HMAC-SHA256(timestamp + method + path + body, secret))
        """
        message = timestamp + method.upper() + path + body
        return hmac.new(
            self.api_secret.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _auth_headers(self, method: str, path: str) -> dict[str, str]:
        timestamp = self._get_timestamp()
        return {
            "CB-ACCESS-KEY": self.api_key,
            "CB-ACCESS-SIGN": self._generate_signature(timestamp, method, path),
            "CB-ACCESS-TIMESTAMP": timestamp,
        }

    def _get(self, path: str) -> dict:
        """Make a GET request and return the decoded response envelope.

        Args:
            path: Request path including any query string (e.g., "/v2/accounts?limit=100")

        Returns:
            Decoded JSON body

        Raises:
            CoinbaseAPIError: On HTTP errors or a body that is not a JSON object
        """
        # The time endpoint is public and must not be signed
        headers = None
        if not path.split("?")[0].endswith("time"):
            headers = self._auth_headers("GET", path)

        try:
            result = self.get_json(path, headers=headers)
        except HTTPClientError as e:
            errors = self._extract_errors(e.response_body)
            message = ", ".join(errors) if errors else str(e)
            logger.error(f"Coinbase API error for {path}: {message}")
            raise CoinbaseAPIError(
                f"{message}: {path}", status_code=e.status_code, errors=errors
            ) from e
        except ValueError as e:
            logger.error(f"Coinbase API returned invalid JSON for {path}: {e}")
            raise CoinbaseParseError(f"Invalid JSON response: {path}") from e

        if not isinstance(result, dict):
            raise CoinbaseParseError(f"Unexpected response body: {path}")

        if result.get("errors"):
            errors = self._extract_errors(result)
            raise CoinbaseAPIError(", ".join(errors) or f"Error response: {path}", errors=errors)

        return result

    @staticmethod
    def _extract_errors(body: str | dict | None) -> list[str]:
        """Pull error messages out of a Coinbase error envelope."""
        if body is None:
            return []
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except ValueError:
                return []
        if not isinstance(body, dict):
            return []
        return [
            err.get("message") or err.get("id", "unknown error")
            for err in body.get("errors", [])
            if isinstance(err, dict)
        ]

    def _get_paginated(self, path: str) -> list[dict]:
        """Fetch every page of a list endpoint by following next_uri."""
        items: list[dict] = []
        next_path: str | None = path

        while next_path:
            result = self._get(next_path)
            data = result.get("data")
            if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
                raise CoinbaseParseError(f"Missing data list in response: {next_path}")
            items.extend(data)

            pagination = result.get("pagination") or {}
            if not isinstance(pagination, dict):
                raise CoinbaseParseError(f"Invalid pagination in response: {next_path}")
            next_path = pagination.get("next_uri")
            if next_path:
                logger.debug(f"Following pagination to {next_path}")

        return items

    def _parse_decimal(self, value: object, field_name: str) -> Decimal:
        if value is None:
            raise CoinbaseParseError(f"Missing amount for {field_name}")
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise CoinbaseParseError(f"Invalid amount for {field_name}: {value!r}") from e
        if not result.is_finite():
            raise CoinbaseParseError(f"Invalid amount for {field_name}: {value!r}")
        return result

    def _parse_money(self, money: dict | None, field_name: str) -> tuple[Decimal, str | None]:
        """Parse a {"amount": "...", "currency": "..."} object."""
        if not isinstance(money, dict):
            raise CoinbaseParseError(f"Missing money object for {field_name}")
        return self._parse_decimal(money.get("amount"), field_name), money.get("currency")

    def _parse_timestamp(self, value: object) -> datetime:
        if not isinstance(value, str):
            raise CoinbaseParseError(f"Missing timestamp: {value!r}")
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise CoinbaseParseError(f"Invalid timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed

    def _parse_account(self, data: dict) -> Account:
        if "id" not in data:
            raise CoinbaseParseError(f"Account without id: {data!r}")
        currency = data.get("currency")
        if isinstance(currency, dict):
            currency = currency.get("code")
        return Account(id=str(data["id"]), name=data.get("name", ""), currency=currency)

    def _parse_transaction(self, data: dict) -> Transaction:
        """Parse an expanded transaction resource.

        Only buy/sell totals are read from the nested breakdowns.
        """
        raw_type = data.get("type")
        if not isinstance(raw_type, str):
            raise CoinbaseParseError(f"Transaction without type: {data.get('id')!r}")

        amount, currency = self._parse_money(data.get("amount"), "amount")
        if not currency:
            raise CoinbaseParseError(f"Transaction without currency: {data.get('id')!r}")

        kind = TransactionKind.from_raw(raw_type)

        buy_total = None
        sell_total = None
        if kind == TransactionKind.BUY:
            buy = data.get("buy") or {}
            if not isinstance(buy, dict):
                raise CoinbaseParseError(f"Invalid buy breakdown: {data.get('id')!r}")
            buy_total, _ = self._parse_money(buy.get("total"), "buy.total")
        elif kind == TransactionKind.SELL:
            sell = data.get("sell") or {}
            if not isinstance(sell, dict):
                raise CoinbaseParseError(f"Invalid sell breakdown: {data.get('id')!r}")
            sell_total, _ = self._parse_money(sell.get("total"), "sell.total")

        native_amount = None
        if data.get("native_amount"):
            native_amount, _ = self._parse_money(data["native_amount"], "native_amount")

        return Transaction(
            kind=kind,
            currency=currency,
            amount=amount,
            created_at=self._parse_timestamp(data.get("created_at")),
            buy_total=buy_total,
            sell_total=sell_total,
            id=data.get("id"),
            raw_type=raw_type,
            native_amount=native_amount,
        )

    def _parse_spot_rate(self, data: dict) -> SpotRate:
        base = data.get("base")
        if not base:
            raise CoinbaseParseError(f"Spot rate without base currency: {data!r}")
        quote = data.get("currency", QUOTE_CURRENCY)
        if quote != QUOTE_CURRENCY:
            raise CoinbaseParseError(
                f"Spot rate for {base} quoted in {quote}, expected {QUOTE_CURRENCY}"
            )
        return SpotRate(currency=base, usd_price=self._parse_decimal(data.get("amount"), base))

    def get_server_time(self) -> datetime:
        """Get the API server time (unauthenticated)."""
        result = self._get("/v2/time")
        data = result.get("data")
        if not isinstance(data, dict):
            raise CoinbaseParseError("Missing data in time response")
        return self._parse_timestamp(data.get("iso"))

    def list_accounts(self) -> list[Account]:
        """Get all wallet accounts.

        Returns:
            List of accounts with id and name
        """
        items = self._get_paginated(f"/v2/accounts?limit={self.page_limit}")
        accounts = [self._parse_account(item) for item in items]
        logger.info(f"Fetched {len(accounts)} Coinbase accounts")
        return accounts

    def list_transactions(self, account_id: str) -> list[Transaction]:
        """Get the full transaction history for one account.

        Args:
            account_id: Coinbase account ID

        Returns:
            Parsed transactions with buy/sell breakdowns expanded
        """
        path = f"/v2/accounts/{account_id}/transactions?limit={self.page_limit}&expand=all"
        items = self._get_paginated(path)
        transactions = [self._parse_transaction(item) for item in items]
        logger.debug(f"Fetched {len(transactions)} transactions for account {account_id}")
        return transactions

    def list_all_transactions(self, account_ids: list[str]) -> list[Transaction]:
        """Get transactions for every account, one request sequence per account.

        Any failure aborts the whole fetch.
        """
        result: list[Transaction] = []
        for account_id in account_ids:
            result.extend(self.list_transactions(account_id))
        logger.info(f"Fetched {len(result)} transactions across {len(account_ids)} accounts")
        return result

    def list_spot_rates(self) -> list[SpotRate]:
        """Get current spot rates for all currencies against USD."""
        result = self._get(f"/v2/prices/{QUOTE_CURRENCY}/spot")
        data = result.get("data")
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CoinbaseParseError("Missing data list in spot price response")
        rates = [self._parse_spot_rate(item) for item in data]
        seen: set[str] = set()
        for rate in rates:
            if rate.currency in seen:
                raise CoinbaseParseError(f"Duplicate spot rate for {rate.currency}")
            seen.add(rate.currency)
        logger.info(f"Fetched {len(rates)} spot rates")
        return rates
