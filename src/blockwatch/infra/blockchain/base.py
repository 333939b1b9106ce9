"""Abstract ledger gateway consumed by the polling engine."""

from abc import ABC, abstractmethod

from blockwatch.domain.models import Transaction


class LedgerGateway(ABC):
    """Answers chain-height and per-block transaction queries for one ledger.

    Implementations raise ``ExternalServiceError`` on any backend failure.
    """

    @abstractmethod
    async def get_block_count(self) -> int:
        """Current chain height."""

    @abstractmethod
    async def get_block_transactions(self, block: int, addresses: frozenset[str]) -> list[Transaction]:
        """Transactions in ``block`` whose sender or receiver is one of ``addresses``."""

    def normalize_address(self, address: str) -> str:
        """Canonical form of ``address`` on this ledger. Addresses are opaque by default."""
        return address
