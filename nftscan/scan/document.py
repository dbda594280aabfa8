"""Metadata document parsing and traversal."""

import json
from collections.abc import Iterator
from typing import Any

from nftscan.shared.exceptions import ParseError

# A parsed metadata document: the top-level JSON object. Nested values are
# null, bool, int, float, str, list or dict.
Document = dict[str, Any]


def parse_document(text: str) -> Document:
    """Parse metadata text into a document.

    Args:
        text: Raw metadata text

    Returns:
        Top-level JSON object

    Raises:
        ParseError: If the text is not JSON or not a JSON object
    """
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ParseError(f"Failed to parse metadata JSON: {e}") from e

    if not isinstance(value, dict):
        raise ParseError(f"Metadata must be a JSON object, got {type(value).__name__}")
    return value


def get_str(document: Document, key: str) -> str | None:
    """Get a top-level string field, ignoring non-string values."""
    value = document.get(key)
    return value if isinstance(value, str) else None


def iter_strings(value: Any) -> Iterator[str]:
    """Yield every string value in a document tree, depth first.

    Object keys are not visited; only values are.
    """
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from iter_strings(item)
    # null, bool and numbers carry no references


def iter_attribute_entries(document: Document) -> Iterator[dict[str, Any]]:
    """Yield well-formed ``attributes`` entries.

    Entries that are not objects or lack a string ``trait_type`` are skipped.
    """
    attributes = document.get("attributes")
    if not isinstance(attributes, list):
        return
    for entry in attributes:
        if isinstance(entry, dict) and isinstance(entry.get("trait_type"), str):
            yield entry
