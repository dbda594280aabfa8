"""Pydantic models for scanned NFT contracts and token metadata."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nftscan.chain.abi import UINT256_MAX
from nftscan.ipfs.cid import is_valid_cid
from nftscan.scan.document import Document, get_str, iter_attribute_entries


def _short_address(address: str) -> str:
    """Create shortened address for display.

    Args:
        address: Full Ethereum address

    Returns:
        Shortened format (0x1234...5678)
    """
    if len(address) < 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


class StandardKind(str, Enum):
    """Token standard implemented by a contract."""

    ERC721 = "erc721"
    ERC1155 = "erc1155"
    UNKNOWN = "unknown"


class ContentType(str, Enum):
    """Content-type heuristic tag for an IPFS resource."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    MODEL3D = "model3d"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


class ContractHandle(BaseModel):
    """Contract being scanned and the endpoint used to read it.

    Attributes:
        address: Contract address (lowercase)
        rpc_url: JSON-RPC endpoint for read calls
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="NFT contract address")
    rpc_url: str = Field(..., description="JSON-RPC endpoint")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate contract address format.

        Args:
            v: Contract address string

        Returns:
            Lowercase contract address

        Raises:
            ValueError: If address format is invalid
        """
        v = v.strip()
        if not v.startswith("0x"):
            raise ValueError("Contract address must start with 0x")
        if len(v) != 42:
            raise ValueError("Contract address must be 42 characters")
        try:
            int(v[2:], 16)
        except ValueError:
            raise ValueError("Contract address must be hexadecimal") from None
        return v.lower()

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC URL is non-empty."""
        if not v.strip():
            raise ValueError("RPC URL must be non-empty")
        return v.strip()

    @property
    def short_address(self) -> str:
        """Get shortened address for display."""
        return _short_address(self.address)


class Attribute(BaseModel):
    """A single metadata trait.

    Attributes:
        trait_type: Trait name
        value: Trait value (string, number, bool or nested JSON)
        display_type: Optional rendering hint (e.g. "number", "date")
    """

    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: Any = None
    display_type: str | None = None


class Resource(BaseModel):
    """IPFS resource referenced by token metadata.

    Attributes:
        cid: Content identifier
        url: Canonical ``ipfs://`` URL
        content_type: Content-type heuristic tag
        size: Size in bytes, when the resource was downloaded
    """

    model_config = ConfigDict(frozen=True)

    cid: str
    url: str
    content_type: ContentType = ContentType.UNKNOWN
    size: int | None = Field(None, ge=0)

    @field_validator("cid")
    @classmethod
    def validate_cid(cls, v: str) -> str:
        """Reject anything that is not a valid CID."""
        if not is_valid_cid(v):
            raise ValueError(f"Invalid CID: {v}")
        return v


class TokenMetadataRecord(BaseModel):
    """Resolved metadata for one token.

    Attributes:
        token_id: Token ID (uint256)
        metadata_uri: URI returned by the contract
        owner: Token owner address, if known
        name: Token name
        description: Token description
        image: Image URI as written in the metadata
        animation_url: Animation URI as written in the metadata
        external_url: External link
        attributes: Traits in document order
        resources: IPFS resources, unique by CID and sorted by CID
    """

    model_config = ConfigDict(frozen=True)

    token_id: int = Field(..., ge=0, le=UINT256_MAX)
    metadata_uri: str
    owner: str | None = None
    name: str | None = None
    description: str | None = None
    image: str | None = None
    animation_url: str | None = None
    external_url: str | None = None
    attributes: tuple[Attribute, ...] = ()
    resources: tuple[Resource, ...] = ()

    @model_validator(mode="after")
    def check_resources(self) -> "TokenMetadataRecord":
        """Ensure the resource set is unique by CID and sorted ascending."""
        cids = [r.cid for r in self.resources]
        if len(set(cids)) != len(cids):
            raise ValueError("Resources must be unique by CID")
        if cids != sorted(cids):
            raise ValueError("Resources must be sorted by CID")
        return self

    @property
    def resource_cids(self) -> list[str]:
        """Get the CIDs of all resources."""
        return [r.cid for r in self.resources]

    @classmethod
    def from_document(
        cls,
        token_id: int,
        metadata_uri: str,
        document: Document,
        resources: tuple[Resource, ...],
        owner: str | None = None,
    ) -> "TokenMetadataRecord":
        """Create from a parsed metadata document.

        Non-string values of the well-known text fields are ignored.

        Args:
            token_id: Token ID
            metadata_uri: URI returned by the contract
            document: Parsed metadata
            resources: Resources extracted from the document
            owner: Optional owner address

        Returns:
            TokenMetadataRecord instance
        """
        attributes = tuple(
            Attribute(
                trait_type=entry["trait_type"],
                value=entry.get("value"),
                display_type=entry.get("display_type")
                if isinstance(entry.get("display_type"), str)
                else None,
            )
            for entry in iter_attribute_entries(document)
        )
        return cls(
            token_id=token_id,
            metadata_uri=metadata_uri,
            owner=owner,
            name=get_str(document, "name"),
            description=get_str(document, "description"),
            image=get_str(document, "image"),
            animation_url=get_str(document, "animation_url"),
            external_url=get_str(document, "external_url"),
            attributes=attributes,
            resources=resources,
        )
