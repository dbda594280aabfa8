"""Per-token scan pipeline over an NFT contract."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from nftscan.chain.detector import StandardDetector
from nftscan.chain.enumerator import TokenEnumerator
from nftscan.chain.rpc import ChainReader
from nftscan.core.config import ResolverConfig, ScanConfig
from nftscan.core.logging import get_logger, scan_context
from nftscan.ipfs.extractor import extract
from nftscan.ipfs.http import HttpFetcher
from nftscan.ipfs.resolver import URIResolver
from nftscan.scan.document import parse_document
from nftscan.scan.models import ContractHandle, Resource, StandardKind, TokenMetadataRecord
from nftscan.shared.exceptions import (
    AllGatewaysFailedError,
    ChainCallError,
    NftScanError,
    ProtocolDecodeError,
)

logger = get_logger(__name__)


class ScanOrchestrator:
    """Drive the metadata pipeline for every token of a contract.

    Tokens are processed one at a time in ascending id order. A failure for
    one token is logged and the token left out of the result; only failing
    to determine ERC-721 bounds aborts the scan.

    Attributes:
        detector: Token standard detector
        enumerator: Token id source
        resolver: URI and gateway resolver
        config: Scan options
        standard: Standard detected by the most recent scan
    """

    def __init__(
        self,
        detector: StandardDetector,
        enumerator: TokenEnumerator,
        resolver: URIResolver,
        config: ScanConfig | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            detector: Token standard detector
            enumerator: Token id source
            resolver: URI and gateway resolver
            config: Scan options (defaults apply when omitted)
        """
        self.detector = detector
        self.enumerator = enumerator
        self.resolver = resolver
        self.config = config or ScanConfig()
        self.standard: StandardKind | None = None

    @classmethod
    def create(
        cls,
        reader: ChainReader,
        fetcher: HttpFetcher,
        resolver_config: ResolverConfig | None = None,
        scan_config: ScanConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "ScanOrchestrator":
        """Wire an orchestrator from its external collaborators.

        Args:
            reader: Chain read-call interface
            fetcher: HTTP fetch interface
            resolver_config: Gateway list and retry policy
            scan_config: Scan options
            sleep: Async sleep shared by pacing and backoff

        Returns:
            ScanOrchestrator instance
        """
        scan_config = scan_config or ScanConfig()
        return cls(
            detector=StandardDetector(reader),
            enumerator=TokenEnumerator(reader, scan_config, sleep=sleep),
            resolver=URIResolver(reader, fetcher, resolver_config, sleep=sleep),
            config=scan_config,
        )

    async def scan(
        self,
        contract: ContractHandle,
        token_ids: Iterable[int] | None = None,
        cancel_event: asyncio.Event | None = None,
        standard: StandardKind | None = None,
    ) -> list[TokenMetadataRecord]:
        """Scan a contract and resolve metadata for each token.

        Args:
            contract: Contract to scan
            token_ids: Explicit ids to scan instead of enumerating
            cancel_event: When set, the scan stops before the next token
            standard: Known standard, skipping detection

        Returns:
            Records for every token whose metadata resolved, in id order

        Raises:
            TotalSupplyError: If ERC-721 bounds cannot be determined
        """
        with scan_context(contract.short_address):
            if standard is None or standard == StandardKind.UNKNOWN:
                standard = await self.detector.detect(contract)
            self.standard = standard

            logger.info("scan.started", standard=standard.value)

            if token_ids is not None:
                ids = self.enumerator.explicit_ids(token_ids)
            else:
                ids = self.enumerator.token_ids(contract, standard)

            records: list[TokenMetadataRecord] = []
            failed = 0

            async for token_id in ids:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("scan.cancelled", scanned=len(records), next_token_id=token_id)
                    break

                try:
                    record = await self.scan_token(contract, token_id, standard)
                except NftScanError as e:
                    failed += 1
                    # ERC-1155 probing expects most ids to be missing
                    log = logger.debug if standard == StandardKind.ERC1155 else logger.warning
                    log(
                        "scan.token.failed",
                        token_id=token_id,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    continue

                records.append(record)
                logger.info(
                    "scan.token.scanned", token_id=token_id, resources=len(record.resources)
                )

            logger.info("scan.completed", scanned=len(records), failed=failed)
            return records

    async def scan_token(
        self,
        contract: ContractHandle,
        token_id: int,
        standard: StandardKind = StandardKind.ERC721,
    ) -> TokenMetadataRecord:
        """Resolve metadata for a single token.

        Args:
            contract: Contract being scanned
            token_id: Token ID
            standard: Token standard; ERC-1155 may fall back to ``uri``

        Returns:
            TokenMetadataRecord for the token

        Raises:
            NftScanError: If any pipeline step fails
        """
        metadata_uri = await self._read_metadata_uri(contract, token_id, standard)

        logger.debug("scan.token.uri", token_id=token_id, uri=metadata_uri)

        text = await self.resolver.download_metadata(metadata_uri)
        document = parse_document(text)
        resources = extract(document)

        if self.config.verify_resources:
            resources = await self._verify_resources(resources)

        return TokenMetadataRecord.from_document(token_id, metadata_uri, document, resources)

    async def _read_metadata_uri(
        self,
        contract: ContractHandle,
        token_id: int,
        standard: StandardKind,
    ) -> str:
        """Read the token URI via ``tokenURI``, trying ERC-1155 ``uri`` if that fails."""
        try:
            return await self.resolver.get_token_uri(contract, token_id)
        except (ChainCallError, ProtocolDecodeError) as e:
            if standard != StandardKind.ERC1155:
                raise
            logger.debug("scan.token.uri_fallback", token_id=token_id, error=str(e))
        return await self.resolver.get_uri(contract, token_id)

    async def _verify_resources(self, resources: tuple[Resource, ...]) -> tuple[Resource, ...]:
        """Download each resource to record its size.

        Resources no gateway can serve are kept without a size.
        """
        verified = []
        for resource in resources:
            try:
                body = await self.resolver.download_resource(resource.url[len("ipfs://") :])
            except AllGatewaysFailedError as e:
                logger.warning("scan.resource.unavailable", cid=resource.cid, error=str(e))
                verified.append(resource)
                continue
            verified.append(resource.model_copy(update={"size": len(body)}))
        return tuple(verified)
