"""Node-wallet RPC gateway (``getblockcount`` / ``transaction list``)."""

import logging
from decimal import Decimal, InvalidOperation

from blockwatch.domain.models import Transaction
from blockwatch.exceptions import ExternalServiceError
from blockwatch.infra.blockchain.base import LedgerGateway
from blockwatch.infra.blockchain.jsonrpc_client import JsonRpcClient

logger = logging.getLogger(__name__)


class NodeGateway(LedgerGateway):
    """Backend that reports ``amount`` and ``fee`` directly.

    ``transaction list <block>`` returns every transaction from ``block`` onward;
    only the records of exactly ``block`` touching a watched address are kept.
    """

    def __init__(self, rpc: JsonRpcClient) -> None:
        self._rpc = rpc

    async def get_block_count(self) -> int:
        result = await self._rpc.call("getblockcount")
        if isinstance(result, bool) or not isinstance(result, (int, str)):
            raise ExternalServiceError(f"Could not parse block count from {result!r}")
        try:
            return int(result)
        except ValueError as e:
            raise ExternalServiceError(f"Could not parse block count from {result!r}") from e

    async def get_block_transactions(self, block: int, addresses: frozenset[str]) -> list[Transaction]:
        result = await self._rpc.call("transaction", ["list", block])
        if result is None:
            return []
        if not isinstance(result, list):
            raise ExternalServiceError(f"Malformed transaction list for block {block}")

        txs = []
        for raw in result:
            try:
                tx = self._build_transaction(raw)
            except (KeyError, TypeError, ValueError, InvalidOperation) as e:
                raise ExternalServiceError(f"Malformed transaction record for block {block}: {e}") from e
            if tx.block == block and tx.touches(addresses):
                txs.append(tx)
        return txs

    def _build_transaction(self, raw: dict) -> Transaction:
        return Transaction(
            tx_hash=raw["txid"],
            from_addr=raw.get("from") or "",
            to_addr=raw.get("to") or "",
            block=int(raw.get("block") or 0),
            value=Decimal(str(raw.get("amount") or 0)),
            fee=Decimal(str(raw.get("fee") or 0)),
        )
