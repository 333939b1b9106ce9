from pydantic import BaseModel


class CurrentBlockResponse(BaseModel):
    current_block: int
