"""Holdings and profit/loss aggregation.

Folds exchange transactions into per-currency buckets, joins them against
current spot rates and derives market value and profit per currency. All
functions are pure: the reporting window is passed in as a resolved cutoff.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from cbgains.services.gains.exceptions import GainsError, UnrecognizedTransactionKindError
from cbgains.services.gains.types import (
    AggregateBucket,
    GainsReport,
    GainsTotals,
    HoldingRecord,
    SpotRate,
    Transaction,
    TransactionKind,
)

logger = logging.getLogger(__name__)


def filter_since(transactions: Iterable[Transaction], cutoff: datetime) -> list[Transaction]:
    """Keep transactions created at or after cutoff (inclusive lower bound)."""
    return [t for t in transactions if t.created_at >= cutoff]


def _require_total(transaction: Transaction, total: Decimal | None) -> Decimal:
    if total is None:
        raise GainsError(
            f"{transaction.kind} transaction for {transaction.currency} has no total"
        )
    return total


def accumulate(transactions: Iterable[Transaction]) -> dict[str, AggregateBucket]:
    """Fold transactions into one bucket per currency code.

    Every recognized kind adds its amount to the net amount. Buys add their
    total to cost basis, sells subtract theirs.

    Raises:
        UnrecognizedTransactionKindError: For any kind other than send/buy/sell
    """
    buckets: dict[str, AggregateBucket] = {}

    for transaction in transactions:
        if transaction.kind not in (
            TransactionKind.SEND,
            TransactionKind.BUY,
            TransactionKind.SELL,
        ):
            raise UnrecognizedTransactionKindError(
                transaction.raw_type or str(transaction.kind),
                transaction.currency,
                transaction.id,
            )

        bucket = buckets.setdefault(transaction.currency, AggregateBucket())
        bucket.net_amount += transaction.amount

        if transaction.kind == TransactionKind.BUY:
            bucket.cost_basis += _require_total(transaction, transaction.buy_total)
        elif transaction.kind == TransactionKind.SELL:
            bucket.cost_basis -= _require_total(transaction, transaction.sell_total)

    logger.debug(f"Accumulated {len(buckets)} currency buckets")
    return buckets


def merge_buckets(*bucket_maps: dict[str, AggregateBucket]) -> dict[str, AggregateBucket]:
    """Union partial bucket maps, adding totals where currencies collide.

    Inputs are left untouched.
    """
    merged: dict[str, AggregateBucket] = {}
    for bucket_map in bucket_maps:
        for currency, bucket in bucket_map.items():
            merged.setdefault(currency, AggregateBucket()).merge(bucket)
    return merged


def join_spot_rates(
    buckets: dict[str, AggregateBucket], spot_rates: Iterable[SpotRate]
) -> list[HoldingRecord]:
    """Build holding records for currencies with both a bucket and a spot rate.

    Currencies without transactions, or whose net amount is zero, produce no
    record. Records are ordered by currency code.
    """
    records = []
    for rate in spot_rates:
        bucket = buckets.get(rate.currency)
        if bucket is None or bucket.net_amount == 0:
            continue

        records.append(
            HoldingRecord(
                currency=rate.currency,
                net_amount=bucket.net_amount,
                cost_basis=bucket.cost_basis,
                market_value=bucket.net_amount * rate.usd_price,
            )
        )

    records.sort(key=lambda r: r.currency)
    return records


def compute_totals(records: Iterable[HoldingRecord]) -> GainsTotals:
    """Sum cost basis and market value across records.

    Profit and percent on the result are derived from these sums, never
    from per-record values.
    """
    cost_basis = Decimal("0")
    market_value = Decimal("0")
    for record in records:
        cost_basis += record.cost_basis
        market_value += record.market_value
    return GainsTotals(cost_basis=cost_basis, market_value=market_value)


def calculate_gains(
    transactions: Iterable[Transaction],
    spot_rates: Iterable[SpotRate],
    cutoff: datetime,
) -> GainsReport:
    """Compute the gains report for transactions created at or after cutoff.

    Args:
        transactions: All transactions across accounts
        spot_rates: Current USD spot rates
        cutoff: Inclusive lower bound on transaction creation time

    Returns:
        GainsReport with records sorted by currency and a totals row

    Raises:
        UnrecognizedTransactionKindError: If an in-window transaction has an unknown kind
    """
    in_window = filter_since(transactions, cutoff)
    logger.debug(f"{len(in_window)} transactions on or after {cutoff.isoformat()}")

    buckets = accumulate(in_window)
    holdings = join_spot_rates(buckets, spot_rates)
    totals = compute_totals(holdings)

    logger.info(f"Computed gains for {len(holdings)} currencies")
    return GainsReport(holdings=holdings, totals=totals)
