from blockwatch.domain.models.transaction import Transaction, TransactionLedger

__all__ = [
    "Transaction",
    "TransactionLedger",
]
