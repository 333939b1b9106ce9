"""Transaction value type as recorded in an address ledger."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, TypeAdapter


class Transaction(BaseModel):
    """One ledger transaction.

    Backends populate different fields: a node wallet reports ``value`` and ``fee``
    directly, an Ethereum node reports the raw ``gas`` / ``gas_price`` strings.
    Fields a backend does not report stay zero-valued.
    """

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    from_addr: str = ""
    to_addr: str = ""
    block: int = 0
    fee: Decimal = Decimal(0)
    value: Decimal = Decimal(0)
    gas: str = ""
    gas_price: str = ""

    def addresses(self) -> set[str]:
        """Non-empty addresses this transaction touches (sender and receiver)."""
        return {a for a in (self.from_addr, self.to_addr) if a}

    def touches(self, addresses: set[str] | frozenset[str]) -> bool:
        return self.from_addr in addresses or self.to_addr in addresses


# Serialized form of a per-address ledger
TransactionLedger = TypeAdapter(list[Transaction])
