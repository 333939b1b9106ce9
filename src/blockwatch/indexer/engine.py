"""Polling engine: follows the chain tip and indexes transactions of watched addresses."""

import asyncio
import logging
import threading
from collections.abc import Awaitable
from typing import TypeVar

from blockwatch.db.repos.transaction_repo import TransactionRepo
from blockwatch.domain.enums import EngineState
from blockwatch.exceptions import (
    BatchIndexError,
    ExternalServiceError,
    ParserAlreadyRunningError,
    StorageError,
)
from blockwatch.indexer.cursor import ChainCursor
from blockwatch.indexer.subscribers import AddressSet
from blockwatch.infra.blockchain.base import LedgerGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_CALL_TIMEOUT = 30.0


class PollingEngine:
    """Owns the watched address set and the chain cursor, and runs the poll loop.

    Each tick reads the chain height, then fetches and indexes every block after
    the cursor in increasing order. The cursor moves to a block only after that
    block's transactions are indexed; the first failing block ends the tick and is
    retried on the next one.

    With no watched addresses the cursor jumps straight to the chain height.
    """

    def __init__(
        self,
        gateway: LedgerGateway,
        repo: TransactionRepo,
        subscribers: AddressSet | None = None,
        cursor: ChainCursor | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
        max_blocks_per_tick: int | None = None,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        if max_blocks_per_tick is not None and max_blocks_per_tick < 1:
            raise ValueError(f"max_blocks_per_tick must be >= 1, got {max_blocks_per_tick}")
        self._gateway = gateway
        self._repo = repo
        self.subscribers = subscribers if subscribers is not None else AddressSet()
        self.cursor = cursor if cursor is not None else ChainCursor()
        self._poll_interval = poll_interval
        self._call_timeout = call_timeout
        self._max_blocks_per_tick = max_blocks_per_tick

        self._state = EngineState.STOPPED
        self._state_lock = threading.Lock()
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None
        # (block, {address: tx hashes already written}) left behind by a partially failed batch
        self._partial: tuple[int, dict[str, set[str]]] | None = None

    @property
    def state(self) -> EngineState:
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state == EngineState.RUNNING

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self) -> asyncio.Task:
        """Spawn the poll loop on the running event loop. Returns immediately."""
        with self._state_lock:
            if self._state == EngineState.RUNNING:
                raise ParserAlreadyRunningError("Parser is already running")
            stop_event = asyncio.Event()
            task = asyncio.get_running_loop().create_task(self._loop(stop_event), name="blockwatch-poll-loop")
            task.add_done_callback(self._on_loop_done)
            self._state = EngineState.RUNNING
            self._stop_event = stop_event
            self._task = task
        logger.info("Polling engine started (interval=%.1fs, cursor=%d)", self._poll_interval, self.cursor.get())
        return task

    async def stop(self) -> None:
        """Signal the loop to stop and wait until an in-flight tick has finished."""
        task, stop_event = self._task, self._stop_event
        if task is None or stop_event is None:
            return
        stop_event.set()
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _on_loop_done(self, task: asyncio.Task) -> None:
        with self._state_lock:
            self._state = EngineState.STOPPED
        logger.info("Polling engine stopped at block %d", self.cursor.get())

    async def _loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
            else:
                break

            try:
                await self.process_new_blocks()
            except Exception:
                logger.exception("Unexpected error while processing new blocks")

    def normalize_address(self, address: str) -> str:
        return self._gateway.normalize_address(address)

    async def _call(self, aw: Awaitable[T]) -> T:
        return await asyncio.wait_for(aw, timeout=self._call_timeout)

    async def process_new_blocks(self) -> int:
        """Run one tick. Returns how far the cursor moved."""
        try:
            height = await self._call(self._gateway.get_block_count())
        except (ExternalServiceError, asyncio.TimeoutError) as e:
            logger.warning("Error getting block count: %s", str(e) or "timed out")
            return 0

        last = self.cursor.get()
        if height <= last:
            logger.debug("No new blocks (height=%d, cursor=%d)", height, last)
            return 0

        addresses = frozenset(self.normalize_address(a) for a in self.subscribers.snapshot())
        if not addresses:
            self.cursor.advance(height)
            logger.debug("No subscribers, cursor moved from %d to %d", last, height)
            return height - last

        end = height
        if self._max_blocks_per_tick is not None:
            end = min(height, last + self._max_blocks_per_tick)

        for block in range(last + 1, end + 1):
            if not await self._process_block(block, addresses):
                break
            self.cursor.advance(block)

        current = self.cursor.get()
        if current > last:
            logger.info("Indexed blocks %d-%d for %d address(es)", last + 1, current, len(addresses))
        return current - last

    async def _process_block(self, block: int, addresses: frozenset[str]) -> bool:
        try:
            txs = await self._call(self._gateway.get_block_transactions(block, addresses))
        except (ExternalServiceError, asyncio.TimeoutError) as e:
            logger.warning("Error fetching transactions for block %d: %s", block, str(e) or "timed out")
            return False

        matching = [tx for tx in txs if tx.touches(addresses)]
        if not matching:
            self._partial = None
            return True

        written = self._partial[1] if self._partial and self._partial[0] == block else {}
        try:
            self._repo.save_all(matching, already_written=written)
        except BatchIndexError as e:
            merged = {address: set(hashes) for address, hashes in written.items()}
            for address, hashes in e.indexed.items():
                merged.setdefault(address, set()).update(hashes)
            self._partial = (block, merged)
            logger.error("Error storing transactions for block %d: %s", block, e)
            return False
        except StorageError as e:
            logger.error("Error storing transactions for block %d: %s", block, e)
            return False

        self._partial = None
        logger.debug("Block %d: indexed %d transaction(s)", block, len(matching))
        return True
