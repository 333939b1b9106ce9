"""Public facade over the polling engine and the transaction index."""

import asyncio
import logging

from blockwatch.db.repos.transaction_repo import TransactionRepo
from blockwatch.domain.models import Transaction
from blockwatch.exceptions import ParserNotRunningError, StorageError
from blockwatch.indexer.engine import PollingEngine

logger = logging.getLogger(__name__)


class Parser:
    """Watch addresses and read back the transactions indexed for them.

    ``subscribe``, ``get_transactions`` and ``get_current_block`` are safe to call
    from any thread, including while a tick is in progress.
    """

    def __init__(self, engine: PollingEngine, repo: TransactionRepo) -> None:
        self._engine = engine
        self._repo = repo

    @property
    def is_running(self) -> bool:
        return self._engine.is_running

    def run(self) -> asyncio.Task:
        """Start the background poll loop. Raises ``ParserAlreadyRunningError`` if running."""
        return self._engine.start()

    async def stop(self) -> None:
        await self._engine.stop()

    def _ensure_running(self, operation: str) -> None:
        if not self._engine.is_running:
            raise ParserNotRunningError(f"Cannot {operation} while parser is not running")

    def subscribe(self, address: str) -> bool:
        """Watch ``address``. Returns True if it was not watched before."""
        self._ensure_running("subscribe")
        address = self._engine.normalize_address(address)
        added = self._engine.subscribers.add(address)
        if added:
            logger.info("Subscribed to address %s", address)
        return added

    def get_transactions(self, address: str) -> list[Transaction]:
        """Ledger of ``address``, oldest first. Empty for an address never seen."""
        self._ensure_running("get transactions")
        address = self._engine.normalize_address(address)
        try:
            return self._repo.get_all_by_address(address)
        except StorageError:
            logger.exception("Error retrieving transactions for address %s", address)
            raise

    def get_current_block(self) -> int:
        """Last fully indexed block height (0 before the first tick)."""
        return self._engine.cursor.get()
