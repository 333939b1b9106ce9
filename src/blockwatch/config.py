import base64
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ledger_backend: Literal["ethereum", "node"] = "ethereum"
    rpc_host: str = "localhost"
    rpc_port: int = 4444
    rpc_endpoint: str = ""  # full URL, overrides host/port
    rpc_username: str = ""
    rpc_password: str = ""
    rpc_bearer_token: str = ""
    rpc_timeout: float = 30.0
    rpc_rate_per_second: float = 10.0
    poll_interval: float = 5.0
    start_block: int = 0
    max_blocks_per_tick: Optional[int] = None
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    @property
    def rpc_url(self) -> str:
        if self.rpc_endpoint:
            return self.rpc_endpoint
        return f"http://{self.rpc_host}:{self.rpc_port}"

    @property
    def rpc_headers(self) -> dict[str, str]:
        if self.rpc_bearer_token:
            return {"Authorization": f"Bearer {self.rpc_bearer_token}"}
        if self.rpc_username:
            creds = base64.b64encode(f"{self.rpc_username}:{self.rpc_password}".encode()).decode()
            return {"Authorization": f"Basic {creds}"}
        return {}

    class Config:
        env_file = ".env"
        env_prefix = "BLOCKWATCH_"


settings = Settings()
