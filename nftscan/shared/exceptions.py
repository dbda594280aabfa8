"""Custom exception hierarchy for the NFT scanner."""


class NftScanError(Exception):
    """Base exception for all scanner errors."""

    pass


class ConfigError(NftScanError):
    """Raised when configuration validation fails."""

    pass


class ChainCallError(NftScanError):
    """Raised when an eth_call read fails at the transport or RPC layer."""

    pass


class ProtocolDecodeError(NftScanError):
    """Raised when ABI return data is malformed."""

    pass


class UnsupportedSchemeError(NftScanError):
    """Raised when a token URI uses a scheme that cannot be resolved."""

    def __init__(self, uri: str) -> None:
        """Initialize unsupported scheme error.

        Args:
            uri: The offending URI (truncated in the message)
        """
        self.uri = uri
        super().__init__(f"Unsupported URI format: {uri[:80]}")


class TransportError(NftScanError):
    """Raised when an HTTP request fails before a status is received."""

    pass


class MetadataFetchError(NftScanError):
    """Raised when metadata download retries are exhausted."""

    def __init__(self, url: str, attempts: int) -> None:
        """Initialize metadata fetch error.

        Args:
            url: Gateway URL that was tried
            attempts: Number of attempts made
        """
        self.url = url
        self.attempts = attempts
        super().__init__(f"Failed to download metadata from {url} after {attempts} attempts")


class AllGatewaysFailedError(NftScanError):
    """Raised when no gateway could serve a resource."""

    def __init__(self, cid: str, gateways: list[str]) -> None:
        """Initialize all-gateways-failed error.

        Args:
            cid: Content identifier that was requested
            gateways: Gateways tried, in priority order
        """
        self.cid = cid
        self.gateways = gateways
        super().__init__(f"Failed to download {cid} from all {len(gateways)} gateways")


class ParseError(NftScanError):
    """Raised when a metadata document cannot be parsed."""

    pass


class TotalSupplyError(NftScanError):
    """Raised when ERC-721 token bounds cannot be determined."""

    pass
