"""Token URI retrieval and IPFS gateway resolution."""

import asyncio
from collections.abc import Awaitable, Callable

from nftscan.chain.abi import decode_string, encode_token_uri, encode_uri
from nftscan.chain.rpc import ChainReader
from nftscan.core.config import ResolverConfig
from nftscan.core.logging import get_logger
from nftscan.ipfs.cid import is_valid_cid
from nftscan.ipfs.http import HttpFetcher
from nftscan.scan.models import ContractHandle
from nftscan.shared.exceptions import (
    AllGatewaysFailedError,
    MetadataFetchError,
    TransportError,
    UnsupportedSchemeError,
)

logger = get_logger(__name__)


class URIResolver:
    """Resolve token URIs to gateway URLs and download their content.

    Metadata downloads retry with exponential backoff against the single
    resolved URL. Resource downloads walk the gateway list once, in order.

    Attributes:
        config: Gateway list and retry policy
    """

    def __init__(
        self,
        reader: ChainReader,
        fetcher: HttpFetcher,
        config: ResolverConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize resolver.

        Args:
            reader: Chain read-call interface
            fetcher: HTTP fetch interface
            config: Gateway list and retry policy (defaults apply when omitted)
            sleep: Async sleep used between metadata attempts
        """
        self.reader = reader
        self.fetcher = fetcher
        self.config = config or ResolverConfig()
        self._sleep = sleep

    async def get_token_uri(self, contract: ContractHandle, token_id: int) -> str:
        """Read ``tokenURI(token_id)`` from the contract.

        Raises:
            ChainCallError: If the call fails
            ProtocolDecodeError: If the returned string is malformed
        """
        data = await self.reader.call(contract.address, encode_token_uri(token_id))
        return decode_string(data)

    async def get_uri(self, contract: ContractHandle, token_id: int) -> str:
        """Read ERC-1155 ``uri(token_id)`` and substitute the ``{id}`` placeholder.

        Raises:
            ChainCallError: If the call fails
            ProtocolDecodeError: If the returned string is malformed
        """
        data = await self.reader.call(contract.address, encode_uri(token_id))
        return decode_string(data).replace("{id}", f"{token_id:064x}")

    def gateway_url(self, cid_path: str, gateway: str | None = None) -> str:
        """Build a gateway URL for a CID (optionally followed by a path)."""
        return f"{gateway or self.config.primary_gateway}{cid_path}"

    def normalize_uri(self, uri: str) -> str:
        """Convert a token URI into a fetchable URL.

        Args:
            uri: Raw URI from the contract

        Returns:
            http(s) URL on the primary gateway, or the URI itself if already http(s)

        Raises:
            UnsupportedSchemeError: For ``data:`` and any other scheme
        """
        uri = uri.strip()

        if uri.startswith("ipfs://"):
            path = uri[len("ipfs://") :]
            if path.startswith("ipfs/"):
                path = path[len("ipfs/") :]
            return self.gateway_url(path)

        if uri.startswith(("http://", "https://")):
            return uri

        if is_valid_cid(uri):
            return self.gateway_url(uri)

        raise UnsupportedSchemeError(uri)

    async def download_metadata(self, uri: str) -> str:
        """Download metadata text for a token URI.

        Args:
            uri: Raw URI from the contract

        Returns:
            Response body as text

        Raises:
            UnsupportedSchemeError: If the URI cannot be resolved to a URL
            MetadataFetchError: If every attempt fails
        """
        url = self.normalize_uri(uri)
        max_retries = self.config.max_retries

        logger.debug("ipfs.metadata.download_started", url=url)

        for attempt in range(1, max_retries + 1):
            try:
                response = await self.fetcher.get(url, self.config.request_timeout)
                if response.ok:
                    return response.body.decode("utf-8", errors="replace")
                logger.warning(
                    "ipfs.metadata.http_error",
                    url=url,
                    status=response.status,
                    attempt=attempt,
                    max_retries=max_retries,
                )
            except TransportError as e:
                logger.warning(
                    "ipfs.metadata.transport_error",
                    url=url,
                    error=str(e),
                    attempt=attempt,
                    max_retries=max_retries,
                )

            if attempt < max_retries:
                await self._sleep(self.config.backoff_base_seconds * 2 ** (attempt - 1))

        raise MetadataFetchError(url, max_retries)

    async def download_resource(self, cid: str) -> bytes:
        """Download a resource from the first gateway that serves it.

        Each gateway is tried once, in priority order.

        Args:
            cid: Content identifier (optionally followed by a path)

        Returns:
            Resource bytes

        Raises:
            AllGatewaysFailedError: If no gateway returned a 2xx response
        """
        for gateway in self.config.gateways:
            url = self.gateway_url(cid, gateway)
            logger.debug("ipfs.resource.trying_gateway", url=url)

            try:
                response = await self.fetcher.get(url, self.config.request_timeout)
            except TransportError as e:
                logger.debug("ipfs.resource.gateway_failed", gateway=gateway, error=str(e))
                continue

            if response.ok:
                logger.info(
                    "ipfs.resource.downloaded",
                    cid=cid,
                    gateway=gateway,
                    size=len(response.body),
                )
                return response.body

            logger.debug("ipfs.resource.gateway_status", gateway=gateway, status=response.status)

        raise AllGatewaysFailedError(cid, list(self.config.gateways))
