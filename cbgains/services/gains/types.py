"""Value objects for gains aggregation."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum


class TransactionKind(StrEnum):
    """Ledger entry kinds the aggregator understands."""

    SEND = "send"
    BUY = "buy"
    SELL = "sell"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> "TransactionKind":
        """Map an exchange transaction type to a kind, OTHER if unknown."""
        try:
            kind = cls(raw)
        except ValueError:
            return cls.OTHER
        return kind


@dataclass(frozen=True)
class Transaction:
    """A single historical ledger entry, as sourced from the exchange."""

    kind: TransactionKind
    currency: str
    amount: Decimal
    created_at: datetime
    buy_total: Decimal | None = None
    sell_total: Decimal | None = None

    # Informational, not used by the aggregator
    id: str | None = None
    raw_type: str | None = None
    native_amount: Decimal | None = None


@dataclass(frozen=True)
class SpotRate:
    """Current USD price of a currency."""

    currency: str
    usd_price: Decimal


@dataclass
class AggregateBucket:
    """Running per-currency totals built while scanning transactions."""

    net_amount: Decimal = Decimal("0")
    cost_basis: Decimal = Decimal("0")

    def merge(self, other: "AggregateBucket") -> None:
        """Add another bucket's totals into this one."""
        self.net_amount += other.net_amount
        self.cost_basis += other.cost_basis


def profit_percent(profit: Decimal, cost_basis: Decimal) -> Decimal:
    """Profit as a fraction of cost basis.

    A zero cost basis yields a signed infinity, or NaN when profit is also
    zero, instead of raising.
    """
    if cost_basis == 0:
        if profit == 0:
            return Decimal("NaN")
        return Decimal("Infinity") if profit > 0 else Decimal("-Infinity")
    return profit / cost_basis


@dataclass(frozen=True)
class HoldingRecord:
    """Holdings and gains for one currency."""

    currency: str
    net_amount: Decimal
    cost_basis: Decimal
    market_value: Decimal

    @property
    def profit(self) -> Decimal:
        return self.market_value - self.cost_basis

    @property
    def profit_percent(self) -> Decimal:
        return profit_percent(self.profit, self.cost_basis)


@dataclass(frozen=True)
class GainsTotals:
    """Sums across all emitted holding records."""

    cost_basis: Decimal
    market_value: Decimal

    @property
    def profit(self) -> Decimal:
        return self.market_value - self.cost_basis

    @property
    def profit_percent(self) -> Decimal:
        return profit_percent(self.profit, self.cost_basis)


@dataclass(frozen=True)
class GainsReport:
    """Ordered holding records plus the trailing totals row."""

    holdings: list[HoldingRecord]
    totals: GainsTotals
