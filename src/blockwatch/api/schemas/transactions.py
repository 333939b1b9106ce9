from decimal import Decimal

from pydantic import BaseModel


class TransactionResponse(BaseModel):
    tx_hash: str
    from_addr: str
    to_addr: str
    block: int
    fee: Decimal
    value: Decimal
    gas: str
    gas_price: str

    model_config = {"from_attributes": True}
