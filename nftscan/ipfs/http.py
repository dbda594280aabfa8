"""HTTP fetch interface for IPFS gateway requests."""

import asyncio
from typing import Any, NamedTuple, Protocol

import aiohttp

from nftscan.shared.exceptions import TransportError


class HttpResponse(NamedTuple):
    """Status and body of a completed HTTP request."""

    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        """Check for a 2xx status."""
        return 200 <= self.status < 300


class HttpFetcher(Protocol):
    """GET interface used by the URI resolver."""

    async def get(self, url: str, timeout: float) -> HttpResponse:
        """Fetch a URL, raising TransportError if no response was received."""
        ...


class GatewayFetcher:
    """aiohttp-backed fetcher sharing one session across requests."""

    USER_AGENT = "nftscan/0.1"

    def __init__(self) -> None:
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "GatewayFetcher":
        """Context manager entry: create aiohttp session."""
        self.session = aiohttp.ClientSession(
            headers={"Accept": "*/*", "User-Agent": self.USER_AGENT}
        )
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

    async def get(self, url: str, timeout: float) -> HttpResponse:
        """Fetch a URL.

        Args:
            url: URL to fetch
            timeout: Total request timeout in seconds

        Returns:
            Response status and full body

        Raises:
            TransportError: On connection errors or timeout
        """
        if not self.session:
            raise TransportError("Session not initialized")

        try:
            async with self.session.get(
                url, timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:
                body = await response.read()
                return HttpResponse(status=response.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
