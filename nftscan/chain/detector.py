"""ERC-165 based token standard detection."""

from nftscan.chain.abi import (
    ERC721_INTERFACE_ID,
    ERC1155_INTERFACE_ID,
    decode_bool,
    encode_supports_interface,
)
from nftscan.chain.rpc import ChainReader
from nftscan.core.logging import get_logger
from nftscan.scan.models import ContractHandle, StandardKind
from nftscan.shared.exceptions import ChainCallError, ProtocolDecodeError

logger = get_logger(__name__)


class StandardDetector:
    """Classify a contract as ERC-721 or ERC-1155 via ``supportsInterface``.

    ERC-721 wins when both probes report support. When neither does, the
    contract is assumed to be ERC-721 so scanning can still proceed.
    """

    def __init__(self, reader: ChainReader) -> None:
        """Initialize detector.

        Args:
            reader: Chain read-call interface
        """
        self.reader = reader

    async def supports_interface(self, contract: ContractHandle, interface_id: bytes) -> bool:
        """Probe a single interface.

        A failed call or malformed return counts as unsupported.

        Args:
            contract: Contract to probe
            interface_id: 4-byte ERC-165 interface id

        Returns:
            True if the contract reports support
        """
        try:
            data = await self.reader.call(contract.address, encode_supports_interface(interface_id))
            return decode_bool(data)
        except (ChainCallError, ProtocolDecodeError) as e:
            logger.debug(
                "chain.detect.probe_failed",
                contract=contract.short_address,
                interface_id="0x" + interface_id.hex(),
                error=str(e),
            )
            return False

    async def detect(self, contract: ContractHandle) -> StandardKind:
        """Detect the token standard of a contract.

        Args:
            contract: Contract to classify

        Returns:
            StandardKind.ERC721 or StandardKind.ERC1155
        """
        supports_erc721 = await self.supports_interface(contract, ERC721_INTERFACE_ID)
        supports_erc1155 = await self.supports_interface(contract, ERC1155_INTERFACE_ID)

        if supports_erc721:
            logger.info("chain.detect.erc721", contract=contract.short_address)
            return StandardKind.ERC721

        if supports_erc1155:
            logger.info("chain.detect.erc1155", contract=contract.short_address)
            return StandardKind.ERC1155

        logger.warning("chain.detect.undetermined", contract=contract.short_address, assumed="erc721")
        return StandardKind.ERC721
