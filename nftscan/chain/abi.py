"""Calldata encoding and return-data decoding for the fixed NFT read calls.

Only the call shapes the scanner needs are supported: ``supportsInterface(bytes4)``,
``totalSupply()``, ``tokenURI(uint256)`` and ``uri(uint256)``, returning
``bool``, ``uint256`` and a dynamic ``string`` respectively.
"""

from nftscan.shared.exceptions import ProtocolDecodeError

WORD_SIZE = 32
UINT256_MAX = 2**256 - 1

# Function selectors
SUPPORTS_INTERFACE_SELECTOR = bytes.fromhex("01ffc9a7")
TOTAL_SUPPLY_SELECTOR = bytes.fromhex("18160ddd")
TOKEN_URI_SELECTOR = bytes.fromhex("c87b56dd")
URI_SELECTOR = bytes.fromhex("0e89341c")

# ERC-165 interface IDs
ERC721_INTERFACE_ID = bytes.fromhex("80ac58cd")
ERC1155_INTERFACE_ID = bytes.fromhex("d9b67a26")


def encode_uint256(value: int) -> bytes:
    """Encode an unsigned integer as a 32-byte big-endian word.

    Raises:
        ValueError: If value is outside the uint256 range
    """
    if not 0 <= value <= UINT256_MAX:
        raise ValueError(f"Value out of uint256 range: {value}")
    return value.to_bytes(WORD_SIZE, "big")


def encode_supports_interface(interface_id: bytes) -> bytes:
    """Build calldata for ``supportsInterface(bytes4)``.

    Layout: selector, 28 zero bytes, then the 4-byte interface id.
    """
    if len(interface_id) != 4:
        raise ValueError(f"Interface id must be 4 bytes, got {len(interface_id)}")
    return SUPPORTS_INTERFACE_SELECTOR + bytes(28) + interface_id


def encode_total_supply() -> bytes:
    """Build calldata for ``totalSupply()``."""
    return TOTAL_SUPPLY_SELECTOR


def encode_token_uri(token_id: int) -> bytes:
    """Build calldata for ``tokenURI(uint256)``."""
    return TOKEN_URI_SELECTOR + encode_uint256(token_id)


def encode_uri(token_id: int) -> bytes:
    """Build calldata for ERC-1155 ``uri(uint256)``."""
    return URI_SELECTOR + encode_uint256(token_id)


def decode_bool(data: bytes) -> bool:
    """Decode a ``bool`` return value.

    True iff the low-order byte of the first word equals 1.

    Raises:
        ProtocolDecodeError: If fewer than 32 bytes were returned
    """
    if len(data) < WORD_SIZE:
        raise ProtocolDecodeError(f"bool return too short: {len(data)} bytes")
    return data[WORD_SIZE - 1] == 1


def decode_uint256(data: bytes) -> int:
    """Decode a ``uint256`` return value from the first word.

    Raises:
        ProtocolDecodeError: If fewer than 32 bytes were returned
    """
    if len(data) < WORD_SIZE:
        raise ProtocolDecodeError(f"uint256 return too short: {len(data)} bytes")
    return int.from_bytes(data[:WORD_SIZE], "big")


def decode_string(data: bytes) -> str:
    """Decode a dynamic ``string`` return value.

    Layout: offset word (checked for presence only), length word, then
    ``length`` bytes of UTF-8.

    Raises:
        ProtocolDecodeError: If the payload is truncated or not valid UTF-8
    """
    if len(data) < 2 * WORD_SIZE:
        raise ProtocolDecodeError(f"string return too short: {len(data)} bytes")

    length = int.from_bytes(data[WORD_SIZE : 2 * WORD_SIZE], "big")
    end = 2 * WORD_SIZE + length
    if len(data) < end:
        raise ProtocolDecodeError(
            f"string return truncated: need {end} bytes, got {len(data)}"
        )

    try:
        return data[2 * WORD_SIZE : end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProtocolDecodeError(f"string return is not valid UTF-8: {e}") from e


def encode_string(value: str) -> bytes:
    """Encode a ``string`` the way a contract returns it.

    Inverse of :func:`decode_string`; the payload is zero-padded to a word boundary.
    """
    raw = value.encode("utf-8")
    padding = (-len(raw)) % WORD_SIZE
    return encode_uint256(WORD_SIZE) + encode_uint256(len(raw)) + raw + bytes(padding)
