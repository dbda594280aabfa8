"""IPFS content identifier validation."""

CIDV0_PREFIX = "Qm"
CIDV0_LENGTH = 46
CIDV1_PREFIXES = ("bafy", "bafk", "bafybe")


def is_valid_cid(value: str) -> bool:
    """Check whether a string looks like an IPFS CID.

    CIDv0 is 46 characters starting with ``Qm`` (alphanumerics, ``_`` and ``-``).
    CIDv1 starts with ``bafy``/``bafk``/``bafybe`` and is lowercase base32.

    Args:
        value: Candidate CID

    Returns:
        True if the value passes validation
    """
    if len(value) == CIDV0_LENGTH and value.startswith(CIDV0_PREFIX):
        return all(c.isascii() and (c.isalnum() or c in "_-") for c in value)

    if value.startswith(CIDV1_PREFIXES):
        return all(c.isascii() and (c.islower() or c.isdigit()) for c in value)

    return False
