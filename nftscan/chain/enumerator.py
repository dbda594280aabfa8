"""Candidate token id enumeration for ERC-721 and ERC-1155 contracts."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable

from nftscan.chain.abi import decode_uint256, encode_total_supply
from nftscan.chain.rpc import ChainReader
from nftscan.core.config import ScanConfig
from nftscan.core.logging import get_logger
from nftscan.scan.models import ContractHandle, StandardKind
from nftscan.shared.exceptions import ChainCallError, ProtocolDecodeError, TotalSupplyError

logger = get_logger(__name__)


class TokenEnumerator:
    """Produce the token ids to scan for a classified contract.

    ERC-721 ids come from ``[0, totalSupply)`` with a short pause after every
    ``pace_every`` ids. ERC-1155 has no on-chain enumeration, so a fixed
    range is probed and gaps are expected.
    """

    def __init__(
        self,
        reader: ChainReader,
        config: ScanConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize enumerator.

        Args:
            reader: Chain read-call interface
            config: Enumeration options (defaults apply when omitted)
            sleep: Async sleep used for pacing
        """
        self.reader = reader
        self.config = config or ScanConfig()
        self._sleep = sleep

    async def total_supply(self, contract: ContractHandle) -> int:
        """Read ``totalSupply()`` from the contract.

        Raises:
            TotalSupplyError: If the call fails or returns malformed data
        """
        try:
            data = await self.reader.call(contract.address, encode_total_supply())
            supply = decode_uint256(data)
        except (ChainCallError, ProtocolDecodeError) as e:
            raise TotalSupplyError(f"Failed to read totalSupply: {e}") from e

        logger.info("chain.enumerate.total_supply", contract=contract.short_address, total=supply)
        return supply

    async def token_ids(
        self,
        contract: ContractHandle,
        standard: StandardKind,
    ) -> AsyncIterator[int]:
        """Yield candidate token ids in ascending order.

        Args:
            contract: Contract being scanned
            standard: Detected token standard

        Yields:
            Token ids

        Raises:
            TotalSupplyError: If ERC-721 bounds cannot be determined
        """
        if standard == StandardKind.ERC1155:
            logger.warning(
                "chain.enumerate.erc1155_probe",
                contract=contract.short_address,
                limit=self.config.erc1155_probe_limit,
            )
            for token_id in range(self.config.erc1155_probe_limit):
                yield token_id
            return

        supply = await self.total_supply(contract)
        for count, token_id in enumerate(range(supply), start=1):
            yield token_id
            if count % self.config.pace_every == 0 and count < supply:
                await self._sleep(self.config.pace_delay_seconds)

    async def explicit_ids(self, token_ids: Iterable[int]) -> AsyncIterator[int]:
        """Yield caller-supplied ids, deduplicated and ascending.

        Raises:
            ValueError: If an id is negative
        """
        ids = sorted(set(token_ids))
        if ids and ids[0] < 0:
            raise ValueError(f"Token id must be non-negative, got {ids[0]}")
        for token_id in ids:
            yield token_id
