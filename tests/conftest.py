"""Shared test fixtures."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from cbgains.services.coinbase.client import CoinbaseClient, CoinbaseCredentials
from cbgains.services.gains.types import SpotRate, Transaction, TransactionKind

JAN_15 = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def make_transaction(
    kind: str,
    currency: str,
    amount: str,
    total: str | None = None,
    created_at: datetime = JAN_15,
) -> Transaction:
    """Build a Transaction the way the Coinbase client would."""
    transaction_kind = TransactionKind.from_raw(kind)
    return Transaction(
        kind=transaction_kind,
        currency=currency,
        amount=Decimal(amount),
        created_at=created_at,
        buy_total=Decimal(total) if transaction_kind == TransactionKind.BUY else None,
        sell_total=Decimal(total) if transaction_kind == TransactionKind.SELL else None,
        raw_type=kind,
    )


def make_rate(currency: str, price: str) -> SpotRate:
    return SpotRate(currency=currency, usd_price=Decimal(price))


@pytest.fixture
def credentials() -> CoinbaseCredentials:
    return CoinbaseCredentials(api_key="test_key", api_secret="test_secret")


@pytest.fixture
def client(credentials: CoinbaseCredentials) -> CoinbaseClient:
    """Create a CoinbaseClient instance."""
    return CoinbaseClient(credentials)


def transaction_payload(
    type_: str = "buy",
    amount: str = "1.00000000",
    currency: str = "BTC",
    created_at: str = "2024-01-15T10:30:00Z",
    total: str | None = "100.00",
    id_: str = "tx-1",
) -> dict:
    """A Coinbase v2 transaction resource as returned with expand=all."""
    payload = {
        "id": id_,
        "type": type_,
        "status": "completed",
        "amount": {"amount": amount, "currency": currency},
        "native_amount": {"amount": "100.00", "currency": "USD"},
        "created_at": created_at,
    }
    if type_ in ("buy", "sell") and total is not None:
        payload[type_] = {
            "fee": {"amount": "1.49", "currency": "USD"},
            "amount": {"amount": amount.lstrip("-"), "currency": currency},
            "total": {"amount": total, "currency": "USD"},
            "subtotal": {"amount": "98.51", "currency": "USD"},
        }
    return payload
