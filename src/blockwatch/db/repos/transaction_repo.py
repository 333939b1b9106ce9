import logging
import threading
from collections import defaultdict
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from blockwatch.db.keyvalue import MemoryKeyValueStore
from blockwatch.domain.models import Transaction, TransactionLedger
from blockwatch.exceptions import BatchIndexError, KeyNotFoundError, StorageError

logger = logging.getLogger(__name__)


def group_by_address(txs: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """Map every address a transaction touches to its transactions, in input order.

    A self-transfer lands once in its address's group.
    """
    grouped: dict[str, list[Transaction]] = defaultdict(list)
    for tx in txs:
        for address in sorted(tx.addresses()):
            grouped[address].append(tx)
    return dict(grouped)


class TransactionRepo:
    """Address-indexed, append-only transaction ledgers.

    Each ledger is one JSON document in the key/value store. Appends to the same
    address are serialized by a per-address lock; appends to different addresses
    run independently.
    """

    def __init__(self, store: MemoryKeyValueStore) -> None:
        self._store = store
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, address: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(address)
            if lock is None:
                lock = self._locks[address] = threading.Lock()
            return lock

    def get_all_by_address(self, address: str) -> list[Transaction]:
        try:
            data = self._store.get(address)
        except KeyNotFoundError:
            return []
        except StorageError as e:
            raise StorageError(f"Unable to get transactions for address {address}: {e}") from e

        try:
            return TransactionLedger.validate_json(data)
        except ValidationError as e:
            raise StorageError(f"Unable to decode transactions for address {address}: {e}") from e

    def _append(self, address: str, txs: list[Transaction]) -> None:
        with self._lock_for(address):
            ledger = self.get_all_by_address(address)
            ledger.extend(txs)
            try:
                data = TransactionLedger.dump_json(ledger)
            except (ValueError, TypeError) as e:
                raise StorageError(f"Unable to encode transactions for address {address}: {e}") from e
            self._store.set(address, data)

    def save(self, tx: Transaction) -> None:
        self.save_all([tx])

    def save_all(
        self,
        txs: Iterable[Transaction],
        already_written: Mapping[str, set[str]] | None = None,
    ) -> dict[str, set[str]]:
        """Append a batch to the ledger of every address it touches.

        One read-modify-write per address. Transactions whose hash is listed for an
        address in ``already_written`` are not appended to that address again.
        Returns the hashes written per address; raises ``BatchIndexError`` after all
        groups were attempted if any of them failed.
        """
        already_written = already_written or {}
        indexed: dict[str, set[str]] = {}
        failures: dict[str, Exception] = {}

        for address, group in group_by_address(txs).items():
            done = already_written.get(address, set())
            pending = [tx for tx in group if tx.tx_hash not in done]
            if not pending:
                continue
            try:
                self._append(address, pending)
            except StorageError as e:
                logger.error("Unable to insert %d transaction(s) for address %s: %s", len(pending), address, e)
                failures[address] = e
            else:
                indexed[address] = {tx.tx_hash for tx in pending}

        if failures:
            raise BatchIndexError(failures, indexed)
        return indexed
