"""Gains aggregation services.

Classifies transactions, accumulates per-currency holdings and cost basis,
and derives profit against current spot rates.
"""

from .aggregator import (
    accumulate,
    calculate_gains,
    compute_totals,
    filter_since,
    join_spot_rates,
    merge_buckets,
)
from .exceptions import GainsError, UnrecognizedTransactionKindError
from .types import (
    AggregateBucket,
    GainsReport,
    GainsTotals,
    HoldingRecord,
    SpotRate,
    Transaction,
    TransactionKind,
)

__all__ = [
    "AggregateBucket",
    "GainsError",
    "GainsReport",
    "GainsTotals",
    "HoldingRecord",
    "SpotRate",
    "Transaction",
    "TransactionKind",
    "UnrecognizedTransactionKindError",
    "accumulate",
    "calculate_gains",
    "compute_totals",
    "filter_since",
    "join_spot_rates",
    "merge_buckets",
]
