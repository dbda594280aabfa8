"""Tests for fixed-shape ABI encoding and decoding."""

import pytest

from nftscan.chain.abi import (
    ERC721_INTERFACE_ID,
    decode_bool,
    decode_string,
    decode_uint256,
    encode_string,
    encode_supports_interface,
    encode_token_uri,
    encode_total_supply,
    encode_uint256,
    encode_uri,
)
from nftscan.shared.exceptions import ProtocolDecodeError


class TestEncoding:
    """Tests for calldata builders."""

    def test_supports_interface_layout(self) -> None:
        """Test selector, 28 zero bytes, then the interface id."""
        calldata = encode_supports_interface(ERC721_INTERFACE_ID)

        assert len(calldata) == 36
        assert calldata[:4].hex() == "01ffc9a7"
        assert calldata[4:32] == bytes(28)
        assert calldata[32:].hex() == "80ac58cd"

    def test_supports_interface_rejects_wrong_length(self) -> None:
        """Test interface id must be exactly 4 bytes."""
        with pytest.raises(ValueError, match="4 bytes"):
            encode_supports_interface(b"\x80\xac")

    def test_total_supply_is_selector_only(self) -> None:
        """Test totalSupply() takes no arguments."""
        assert encode_total_supply().hex() == "18160ddd"

    def test_token_uri_big_endian_id(self) -> None:
        """Test tokenURI encodes the id as a 32-byte big-endian word."""
        calldata = encode_token_uri(258)

        assert calldata[:4].hex() == "c87b56dd"
        assert calldata[4:] == (258).to_bytes(32, "big")

    def test_uri_selector(self) -> None:
        """Test ERC-1155 uri(uint256) selector."""
        assert encode_uri(1)[:4].hex() == "0e89341c"

    def test_uint256_bounds(self) -> None:
        """Test values outside uint256 are rejected."""
        assert encode_uint256(2**256 - 1) == b"\xff" * 32
        with pytest.raises(ValueError):
            encode_uint256(2**256)
        with pytest.raises(ValueError):
            encode_uint256(-1)


class TestDecodeBool:
    """Tests for bool return decoding."""

    def test_true_when_low_byte_is_one(self) -> None:
        """Test low-order byte 1 decodes as True."""
        assert decode_bool(encode_uint256(1)) is True

    def test_false_for_zero(self) -> None:
        """Test zero word decodes as False."""
        assert decode_bool(bytes(32)) is False

    def test_false_when_low_byte_not_one(self) -> None:
        """Test only the low-order byte equal to 1 counts."""
        assert decode_bool(encode_uint256(2)) is False
        assert decode_bool(encode_uint256(256)) is False

    def test_short_payload_raises(self) -> None:
        """Test a truncated word is a decode error."""
        with pytest.raises(ProtocolDecodeError):
            decode_bool(b"\x01")


class TestDecodeUint256:
    """Tests for uint256 return decoding."""

    def test_decodes_first_word(self) -> None:
        """Test big-endian decoding ignores trailing bytes."""
        assert decode_uint256(encode_uint256(10_000) + b"\xff" * 32) == 10_000

    def test_empty_payload_raises(self) -> None:
        """Test empty return data is a decode error."""
        with pytest.raises(ProtocolDecodeError, match="too short"):
            decode_uint256(b"")


class TestDecodeString:
    """Tests for dynamic string return decoding."""

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "ipfs://QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG/1.json",
            "https://example.com/api/token/" + "9" * 70,
            "ünïcødé ✓",
        ],
    )
    def test_round_trip(self, value: str) -> None:
        """Test decode recovers exactly what the encoder produced."""
        assert decode_string(encode_string(value)) == value

    def test_encoded_length_is_word_aligned(self) -> None:
        """Test encoder pads to a 32-byte boundary."""
        assert len(encode_string("abc")) == 96

    def test_shorter_than_header_raises(self) -> None:
        """Test fewer than 64 bytes is a decode error."""
        with pytest.raises(ProtocolDecodeError, match="too short"):
            decode_string(bytes(63))

    def test_truncated_body_raises(self) -> None:
        """Test declared length beyond the payload is a decode error."""
        payload = encode_uint256(32) + encode_uint256(40) + b"a" * 39
        with pytest.raises(ProtocolDecodeError, match="truncated"):
            decode_string(payload)

    def test_invalid_utf8_raises(self) -> None:
        """Test invalid UTF-8 is a decode error."""
        payload = encode_uint256(32) + encode_uint256(2) + b"\xff\xfe" + bytes(30)
        with pytest.raises(ProtocolDecodeError, match="UTF-8"):
            decode_string(payload)

    def test_offset_is_not_validated(self) -> None:
        """Test the offset word only needs to be present."""
        payload = encode_uint256(0) + encode_uint256(2) + b"ok"
        assert decode_string(payload) == "ok"
