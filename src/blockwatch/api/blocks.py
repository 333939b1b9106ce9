from typing import Annotated

from fastapi import APIRouter, Depends

from blockwatch.api.deps import get_parser
from blockwatch.api.schemas.blocks import CurrentBlockResponse
from blockwatch.parser import Parser

router = APIRouter(prefix="/api/blocks", tags=["blocks"])

ParserDep = Annotated[Parser, Depends(get_parser)]


@router.get("/current", response_model=CurrentBlockResponse)
def current_block(parser: ParserDep) -> CurrentBlockResponse:
    return CurrentBlockResponse(current_block=parser.get_current_block())
