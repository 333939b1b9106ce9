import asyncio

import pytest

from blockwatch.db.keyvalue import MemoryKeyValueStore
from blockwatch.db.repos.transaction_repo import TransactionRepo
from blockwatch.domain.models import Transaction
from blockwatch.exceptions import ExternalServiceError
from blockwatch.indexer.engine import PollingEngine
from blockwatch.infra.blockchain.base import LedgerGateway
from blockwatch.parser import Parser


class FakeLedgerGateway(LedgerGateway):
    """In-memory ledger: a settable height and a list of transactions per block."""

    def __init__(self, height: int = 0) -> None:
        self.height = height
        self.blocks: dict[int, list[Transaction]] = {}
        self.fail_height = False
        self.fail_blocks: set[int] = set()
        self.hang_blocks: set[int] = set()
        self.fetched: list[int] = []

    def add(self, tx: Transaction) -> Transaction:
        self.blocks.setdefault(tx.block, []).append(tx)
        return tx

    async def get_block_count(self) -> int:
        if self.fail_height:
            raise ExternalServiceError("node unreachable")
        return self.height

    async def get_block_transactions(self, block: int, addresses: frozenset[str]) -> list[Transaction]:
        self.fetched.append(block)
        if block in self.hang_blocks:
            await asyncio.sleep(3600)
        if block in self.fail_blocks:
            raise ExternalServiceError(f"block {block} unavailable")
        return [tx for tx in self.blocks.get(block, []) if tx.touches(addresses)]


@pytest.fixture()
def store():
    return MemoryKeyValueStore()


@pytest.fixture()
def repo(store):
    return TransactionRepo(store)


@pytest.fixture()
def gateway():
    return FakeLedgerGateway()


@pytest.fixture()
def engine(gateway, repo):
    return PollingEngine(gateway, repo, poll_interval=0.01, call_timeout=0.5)


@pytest.fixture()
async def parser(engine, repo):
    p = Parser(engine, repo)
    yield p
    await p.stop()
