"""Shared fixtures: in-memory chain and gateway fakes."""

import json
from typing import Any

import pytest

from nftscan.chain.abi import (
    ERC721_INTERFACE_ID,
    ERC1155_INTERFACE_ID,
    encode_string,
    encode_supports_interface,
    encode_token_uri,
    encode_total_supply,
    encode_uint256,
    encode_uri,
)
from nftscan.core.config import ResolverConfig, ScanConfig
from nftscan.ipfs.http import HttpResponse
from nftscan.scan.models import ContractHandle
from nftscan.shared.exceptions import ChainCallError, TransportError

CONTRACT_ADDRESS = "0x1234567890123456789012345678901234567890"
CID_V0 = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
CID_V1 = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


class FakeChain:
    """ChainReader answering from a calldata -> result table.

    Unknown calldata fails like a reverted call.
    """

    def __init__(self) -> None:
        self.responses: dict[bytes, bytes | Exception] = {}
        self.calls: list[tuple[str, bytes]] = []

    def set(self, calldata: bytes, result: bytes | Exception) -> None:
        self.responses[calldata] = result

    def set_supports(self, erc721: bool | Exception, erc1155: bool | Exception) -> None:
        for interface_id, value in ((ERC721_INTERFACE_ID, erc721), (ERC1155_INTERFACE_ID, erc1155)):
            result = value if isinstance(value, Exception) else encode_uint256(int(value))
            self.set(encode_supports_interface(interface_id), result)

    def set_total_supply(self, supply: int | Exception) -> None:
        result = supply if isinstance(supply, Exception) else encode_uint256(supply)
        self.set(encode_total_supply(), result)

    def set_token_uri(self, token_id: int, uri: str | Exception) -> None:
        result = uri if isinstance(uri, Exception) else encode_string(uri)
        self.set(encode_token_uri(token_id), result)

    def set_uri(self, token_id: int, uri: str) -> None:
        self.set(encode_uri(token_id), encode_string(uri))

    async def call(self, address: str, calldata: bytes) -> bytes:
        self.calls.append((address, calldata))
        result = self.responses.get(calldata, ChainCallError("execution reverted"))
        if isinstance(result, Exception):
            raise result
        return result


class FakeFetcher:
    """HttpFetcher replaying queued responses per URL.

    The last queued response for a URL repeats; unknown URLs raise TransportError.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[HttpResponse | Exception]] = {}
        self.requests: list[str] = []

    def add(self, url: str, *responses: HttpResponse | Exception) -> None:
        self.routes.setdefault(url, []).extend(responses)

    def add_json(self, url: str, document: Any) -> None:
        self.add(url, HttpResponse(200, json.dumps(document).encode()))

    async def get(self, url: str, timeout: float) -> HttpResponse:
        self.requests.append(url)
        queue = self.routes.get(url)
        if not queue:
            raise TransportError(f"connection refused: {url}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result


class SleepRecorder:
    """Async sleep replacement recording requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def contract() -> ContractHandle:
    """Create a sample contract handle."""
    return ContractHandle(address=CONTRACT_ADDRESS, rpc_url="http://localhost:8545")


@pytest.fixture
def fake_chain() -> FakeChain:
    """Create an empty fake chain."""
    return FakeChain()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Create a fake gateway fetcher with no routes."""
    return FakeFetcher()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Create a recording sleep."""
    return SleepRecorder()


@pytest.fixture
def resolver_config() -> ResolverConfig:
    """Create a resolver config with two test gateways."""
    return ResolverConfig(
        gateways=("https://gw-one.test/ipfs/", "https://gw-two.test/ipfs/"),
        max_retries=3,
        backoff_base_seconds=1.0,
        request_timeout=5.0,
    )


@pytest.fixture
def scan_config() -> ScanConfig:
    """Create default scan options."""
    return ScanConfig()


@pytest.fixture
def cid_v0() -> str:
    """Sample CIDv0."""
    return CID_V0


@pytest.fixture
def cid_v1() -> str:
    """Sample CIDv1."""
    return CID_V1
