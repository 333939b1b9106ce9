from blockwatch.db.repos.transaction_repo import TransactionRepo

__all__ = [
    "TransactionRepo",
]
