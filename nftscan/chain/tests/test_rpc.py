"""Tests for the JSON-RPC eth_call client."""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from nftscan.chain.rpc import RpcClient
from nftscan.shared.exceptions import ChainCallError


def _mock_post(client: RpcClient, status: int = 200, body: object = None) -> None:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=body)

    mock_context = MagicMock()
    mock_context.__aenter__ = AsyncMock(return_value=mock_response)
    mock_context.__aexit__ = AsyncMock(return_value=None)

    client.session = AsyncMock()
    client.session.post = MagicMock(return_value=mock_context)


@pytest.mark.asyncio
async def test_call_returns_result_bytes():
    """Test successful eth_call decodes the hex result."""
    client = RpcClient("http://localhost:8545")
    _mock_post(client, body={"jsonrpc": "2.0", "id": 1, "result": "0x0001ff"})

    result = await client.call("0xabc", bytes.fromhex("18160ddd"))

    assert result == b"\x00\x01\xff"
    payload = client.session.post.call_args[1]["json"]
    assert payload["method"] == "eth_call"
    assert payload["params"] == [{"to": "0xabc", "data": "0x18160ddd"}, "latest"]


@pytest.mark.asyncio
async def test_call_empty_result():
    """Test a bare 0x result decodes to empty bytes."""
    client = RpcClient("http://localhost:8545")
    _mock_post(client, body={"jsonrpc": "2.0", "id": 1, "result": "0x"})

    assert await client.call("0xabc", b"") == b""


@pytest.mark.asyncio
async def test_call_rpc_error_raises():
    """Test a JSON-RPC error object raises ChainCallError."""
    client = RpcClient("http://localhost:8545")
    _mock_post(
        client,
        body={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted"}},
    )

    with pytest.raises(ChainCallError, match="execution reverted"):
        await client.call("0xabc", b"")


@pytest.mark.asyncio
async def test_call_http_error_raises():
    """Test non-200 status raises ChainCallError."""
    client = RpcClient("http://localhost:8545")
    _mock_post(client, status=503)

    with pytest.raises(ChainCallError, match="503"):
        await client.call("0xabc", b"")


@pytest.mark.asyncio
async def test_call_transport_error_is_not_retried():
    """Test a network error raises after a single attempt."""
    client = RpcClient("http://localhost:8545")
    client.session = AsyncMock()
    client.session.post = MagicMock(side_effect=aiohttp.ClientError("connection reset"))

    with pytest.raises(ChainCallError, match="transport"):
        await client.call("0xabc", b"")

    assert client.session.post.call_count == 1


@pytest.mark.asyncio
async def test_call_without_session_raises():
    """Test calling outside the context manager fails."""
    client = RpcClient("http://localhost:8545")

    with pytest.raises(ChainCallError, match="Session not initialized"):
        await client.call("0xabc", b"")


def test_empty_rpc_url_rejected():
    """Test constructor validates the endpoint."""
    with pytest.raises(ValueError):
        RpcClient("  ")


@pytest.mark.asyncio
async def test_context_manager_lifecycle():
    """Test session created and closed properly."""
    client = RpcClient("http://localhost:8545")
    assert client.session is None

    async with client as ctx:
        assert ctx is client
        assert client.session is not None

    assert client.session.closed
