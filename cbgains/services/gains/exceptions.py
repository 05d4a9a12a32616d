"""Gains aggregation exceptions."""


class GainsError(Exception):
    """Base exception for gains aggregation."""


class UnrecognizedTransactionKindError(GainsError):
    """Transaction kind the cost-basis accounting does not know how to apply."""

    def __init__(self, kind: str, currency: str, transaction_id: str | None = None):
        self.kind = kind
        self.currency = currency
        self.transaction_id = transaction_id
        detail = f" (transaction {transaction_id})" if transaction_id else ""
        super().__init__(f"Unhandled transaction type: {kind} for {currency}{detail}")
