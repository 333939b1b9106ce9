"""Shared HTTP transport for ledger RPC calls, paced to a fixed request rate."""

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class RateLimitedClient:
    """POSTs to the ledger node no faster than ``rate_per_second``.

    Callers reserve evenly spaced send slots up front, so concurrent requests
    queue in arrival order without holding a lock while they sleep. Auth headers
    from the settings are sent with every request on top of the JSON defaults.
    """

    def __init__(
        self,
        rate_per_second: float = 10.0,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        if rate_per_second <= 0:
            raise ValueError(f"rate_per_second must be positive, got {rate_per_second}")
        self._spacing = 1.0 / rate_per_second
        self._next_slot = 0.0
        self._slot_lock = asyncio.Lock()
        self._client = httpx.AsyncClient(timeout=timeout, headers={**JSON_HEADERS, **(headers or {})})
        self.requests_sent = 0

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def _reserve_slot(self) -> float:
        async with self._slot_lock:
            slot = max(time.monotonic(), self._next_slot)
            self._next_slot = slot + self._spacing
        return slot - time.monotonic()

    async def post(self, url: str, json: dict | list | None = None) -> httpx.Response:
        delay = await self._reserve_slot()
        if delay > 0:
            await asyncio.sleep(delay)
        self.requests_sent += 1
        return await self._client.post(url, json=json)

    async def close(self) -> None:
        if not self.closed:
            logger.debug("Closing RPC transport after %d request(s)", self.requests_sent)
            await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
