"""Ethereum JSON-RPC gateway: one ``eth_getBlockByNumber`` call per block."""

import logging
from decimal import Decimal

from blockwatch.domain.models import Transaction
from blockwatch.exceptions import ExternalServiceError
from blockwatch.infra.blockchain.base import LedgerGateway
from blockwatch.infra.blockchain.jsonrpc_client import JsonRpcClient

logger = logging.getLogger(__name__)

WEI_PER_ETH = Decimal(10) ** 18


def _hex_to_int(value: str | int | None) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 16) if value.startswith("0x") else int(value)


class EthereumGateway(LedgerGateway):
    """Reads full blocks from an Ethereum node and keeps the watched addresses' transactions.

    Hex addresses compare case-insensitively: both transaction and watched
    addresses are lower-cased before matching.
    Values are converted from wei to ether, ``gas`` and ``gas_price`` keep the node's
    raw hex strings and ``fee`` stays zero.
    """

    def __init__(self, rpc: JsonRpcClient) -> None:
        self._rpc = rpc

    def normalize_address(self, address: str) -> str:
        return address.strip().lower()

    async def get_block_count(self) -> int:
        result = await self._rpc.call("eth_blockNumber", [])
        if result is None:
            raise ExternalServiceError("eth_blockNumber returned no result")
        try:
            return _hex_to_int(result)
        except (TypeError, ValueError, AttributeError) as e:
            raise ExternalServiceError(f"Malformed eth_blockNumber result: {result!r}") from e

    async def get_block_transactions(self, block: int, addresses: frozenset[str]) -> list[Transaction]:
        result = await self._rpc.call("eth_getBlockByNumber", [hex(block), True])
        if result is None:
            # Height was reported but the block is not served yet
            raise ExternalServiceError(f"Block {block} not available")
        if not isinstance(result, dict):
            raise ExternalServiceError(f"Malformed eth_getBlockByNumber result for block {block}")

        watched = {a.lower() for a in addresses}
        txs = []
        for raw in result.get("transactions") or []:
            if not isinstance(raw, dict):
                continue
            from_addr = (raw.get("from") or "").lower()
            to_addr = (raw.get("to") or "").lower()
            if from_addr not in watched and to_addr not in watched:
                continue
            try:
                txs.append(self._build_transaction(raw, block, from_addr, to_addr))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ExternalServiceError(f"Malformed transaction in block {block}: {e}") from e

        logger.debug("Block %d: %d matching transaction(s)", block, len(txs))
        return txs

    def _build_transaction(self, raw: dict, block: int, from_addr: str, to_addr: str) -> Transaction:
        return Transaction(
            tx_hash=raw["hash"],
            from_addr=from_addr,
            to_addr=to_addr,
            block=_hex_to_int(raw.get("blockNumber")) or block,
            value=Decimal(_hex_to_int(raw.get("value"))) / WEI_PER_ETH,
            gas=raw.get("gas") or "",
            gas_price=raw.get("gasPrice") or "",
        )
