from pydantic import BaseModel, field_validator

from blockwatch.api.schemas.transactions import TransactionResponse


class SubscribeRequest(BaseModel):
    address: str

    @field_validator("address")
    @classmethod
    def normalize_address(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("address must not be empty")
        return v


class SubscribeResponse(BaseModel):
    address: str
    newly_added: bool


class AddressTransactions(BaseModel):
    address: str
    transactions: list[TransactionResponse]
    total: int
