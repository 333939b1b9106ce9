"""Tests for JsonRpcClient — JSON-RPC request/response handling."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from blockwatch.exceptions import ExternalServiceError
from blockwatch.infra.blockchain.jsonrpc_client import JsonRpcClient

ENDPOINT = "http://localhost:4444"


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def rpc(mock_http):
    return JsonRpcClient(endpoint=ENDPOINT, http_client=mock_http)


def _mock_response(data, status_code: int = 200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data
    return resp


class TestCall:
    async def test_returns_result(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": "0x10"})

        assert await rpc.call("eth_blockNumber", []) == "0x10"

    async def test_request_payload(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": []})

        await rpc.call("transaction", ["list", 7])
        args, kwargs = mock_http.post.call_args
        assert args[0] == ENDPOINT
        payload = kwargs["json"]
        assert payload["jsonrpc"] == "2.0"
        assert payload["method"] == "transaction"
        assert payload["params"] == ["list", 7]
        assert isinstance(payload["id"], int)

    async def test_params_omitted_when_none(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": 5})

        await rpc.call("getblockcount")
        assert "params" not in mock_http.post.call_args[1]["json"]

    async def test_null_result(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1, "result": None})

        assert await rpc.call("eth_getBlockByNumber", ["0x1", True]) is None


class TestCallErrors:
    async def test_rpc_error_retried_then_raised(self, rpc, mock_http):
        """RPC errors are retried 3 times, then the last error is re-raised."""
        mock_http.post.return_value = _mock_response({
            "jsonrpc": "2.0", "id": 1,
            "error": {"code": -32601, "message": "Method not found"},
        })

        with pytest.raises(ExternalServiceError, match="-32601:Method not found"):
            await rpc.call("nope")
        assert mock_http.post.call_count == 3

    async def test_transport_error(self, rpc, mock_http):
        mock_http.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ExternalServiceError):
            await rpc.call("getblockcount")

    async def test_timeout(self, rpc, mock_http):
        mock_http.post.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(ExternalServiceError):
            await rpc.call("getblockcount")

    async def test_undecodable_body(self, rpc, mock_http):
        resp = _mock_response(None, status_code=502)
        resp.json.side_effect = ValueError("Expecting value")
        mock_http.post.return_value = resp

        with pytest.raises(ExternalServiceError, match="status code: 502"):
            await rpc.call("getblockcount")

    async def test_http_error_status(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"jsonrpc": "2.0", "id": 1}, status_code=401)

        with pytest.raises(ExternalServiceError, match="401"):
            await rpc.call("getblockcount")
