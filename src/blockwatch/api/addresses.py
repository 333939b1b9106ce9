from typing import Annotated

from fastapi import APIRouter, Depends

from blockwatch.api.deps import get_parser
from blockwatch.api.schemas.addresses import AddressTransactions, SubscribeRequest, SubscribeResponse
from blockwatch.api.schemas.transactions import TransactionResponse
from blockwatch.parser import Parser

router = APIRouter(prefix="/api/addresses", tags=["addresses"])

ParserDep = Annotated[Parser, Depends(get_parser)]


@router.post("", response_model=SubscribeResponse)
def subscribe(body: SubscribeRequest, parser: ParserDep) -> SubscribeResponse:
    """Start watching an address. Subscribing twice is not an error."""
    newly_added = parser.subscribe(body.address)
    return SubscribeResponse(address=body.address, newly_added=newly_added)


@router.get("/{address}/transactions", response_model=AddressTransactions)
def get_transactions(address: str, parser: ParserDep) -> AddressTransactions:
    address = address.strip().lower()
    txs = parser.get_transactions(address)
    return AddressTransactions(
        address=address,
        transactions=[TransactionResponse.model_validate(tx) for tx in txs],
        total=len(txs),
    )
