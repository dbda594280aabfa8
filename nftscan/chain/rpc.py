"""JSON-RPC eth_call client for read-only contract calls."""

import asyncio
from typing import Any, Protocol

import aiohttp

from nftscan.core.logging import get_logger
from nftscan.shared.exceptions import ChainCallError

logger = get_logger(__name__)


class ChainReader(Protocol):
    """Read-only contract call interface."""

    async def call(self, address: str, calldata: bytes) -> bytes:
        """Execute a read-only call and return the raw result bytes."""
        ...


class RpcClient:
    """Async JSON-RPC client issuing ``eth_call`` against the latest block.

    Each call is attempted exactly once; callers decide how to treat failures.

    Attributes:
        rpc_url: JSON-RPC endpoint URL
        timeout: Per-request timeout in seconds
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: JSON-RPC endpoint URL
            timeout: Per-request timeout in seconds
        """
        url = (rpc_url or "").strip()
        if not url:
            raise ValueError("rpc_url must be a non-empty string.")

        self.rpc_url = url
        self.timeout = timeout
        self.session: aiohttp.ClientSession | None = None
        self._next_id = 1

    async def __aenter__(self) -> "RpcClient":
        """Context manager entry: create aiohttp session."""
        self.session = aiohttp.ClientSession(headers={"Content-Type": "application/json"})
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit: close aiohttp session."""
        if self.session:
            await self.session.close()

    async def call(self, address: str, calldata: bytes) -> bytes:
        """Execute ``eth_call`` and return the decoded result bytes.

        Args:
            address: Contract address
            calldata: ABI-encoded call data

        Returns:
            Raw return data (empty for ``0x``)

        Raises:
            ChainCallError: On transport errors, timeouts, HTTP errors,
                JSON-RPC errors or a malformed result
        """
        if not self.session:
            raise ChainCallError("Session not initialized")

        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": "eth_call",
            "params": [{"to": address, "data": "0x" + calldata.hex()}, "latest"],
        }
        self._next_id += 1

        try:
            async with self.session.post(
                self.rpc_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise ChainCallError(f"RPC HTTP error: {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("chain.rpc.transport_error", address=address, error=str(e))
            raise ChainCallError(f"RPC transport error: {e}") from e
        except ValueError as e:
            raise ChainCallError(f"RPC returned invalid JSON: {e}") from e

        return _parse_result(data)


def _parse_result(data: Any) -> bytes:
    """Extract the hex result from a JSON-RPC response body."""
    if not isinstance(data, dict):
        raise ChainCallError("Unexpected JSON-RPC response (non-object).")

    error_obj = data.get("error")
    if isinstance(error_obj, dict):
        code = error_obj.get("code")
        message = error_obj.get("message") or "unknown error"
        raise ChainCallError(f"RPC error {code}: {message}")

    result = data.get("result")
    if not isinstance(result, str) or not result.startswith("0x"):
        raise ChainCallError("Unexpected JSON-RPC response (missing hex result).")

    try:
        return bytes.fromhex(result[2:])
    except ValueError as e:
        raise ChainCallError(f"RPC result is not valid hex: {e}") from e
