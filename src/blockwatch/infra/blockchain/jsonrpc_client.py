"""JSON-RPC 2.0 over HTTP POST."""

import itertools
import logging
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from blockwatch.exceptions import ExternalServiceError
from blockwatch.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


class JsonRpcClient:
    """Minimal JSON-RPC client. Every failure surfaces as ``ExternalServiceError``."""

    def __init__(self, endpoint: str, http_client: RateLimitedClient) -> None:
        self._endpoint = endpoint
        self._http = http_client
        self._ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @retry(
        retry=retry_if_exception_type(ExternalServiceError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
    )
    async def call(self, method: str, params: list | dict | None = None) -> Any:
        """Execute a JSON-RPC call and return the result field."""
        payload: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
        }
        if params is not None:
            payload["params"] = params

        try:
            resp = await self._http.post(self._endpoint, json=payload)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"rpc call {method}() on {self._endpoint}: {e!r}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"rpc call {method}() on {self._endpoint} status code: {resp.status_code}. "
                f"could not decode body to rpc response: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ExternalServiceError(
                f"rpc call {method}() on {self._endpoint} status code: {resp.status_code}. rpc response missing"
            )

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                msg = f"{error.get('code')}:{error.get('message', '')}"
            else:
                msg = str(error)
            raise ExternalServiceError(f"RPC error ({method}): {msg}")

        if resp.status_code >= 400:
            raise ExternalServiceError(f"rpc call {method}() on {self._endpoint} status code: {resp.status_code}")

        return data.get("result")
