"""Extraction of IPFS resource references from metadata documents."""

import mimetypes
from pathlib import PurePosixPath
from typing import Any

from nftscan.ipfs.cid import is_valid_cid
from nftscan.scan.document import Document, iter_strings
from nftscan.scan.models import ContentType, Resource

# Fields whose values are expected to point at media, with their tag
WELL_KNOWN_FIELDS: tuple[tuple[str, ContentType], ...] = (
    ("image", ContentType.IMAGE),
    ("animation_url", ContentType.VIDEO),
)

# Extensions mimetypes does not reliably know
MODEL_EXTENSIONS = {".glb", ".gltf", ".obj", ".fbx", ".usdz", ".stl"}

DOCUMENT_MIME_TYPES = {"application/json", "application/pdf", "application/xml"}


def content_type_from_mime(mime: Any) -> ContentType:
    """Map a MIME type string to a content-type tag.

    Args:
        mime: MIME type such as "image/png" (non-strings map to UNKNOWN)

    Returns:
        Matching ContentType
    """
    if not isinstance(mime, str) or "/" not in mime:
        return ContentType.UNKNOWN

    mime = mime.split(";")[0].strip().lower()
    major = mime.split("/")[0]
    if major == "image":
        return ContentType.IMAGE
    if major == "video":
        return ContentType.VIDEO
    if major == "audio":
        return ContentType.AUDIO
    if major == "model":
        return ContentType.MODEL3D
    if major == "text" or mime in DOCUMENT_MIME_TYPES:
        return ContentType.DOCUMENT
    return ContentType.UNKNOWN


def content_type_from_path(path: str) -> ContentType:
    """Guess a content-type tag from a file path's extension."""
    suffix = PurePosixPath(path).suffix.lower()
    if not suffix:
        return ContentType.UNKNOWN
    if suffix in MODEL_EXTENSIONS:
        return ContentType.MODEL3D
    mime, _ = mimetypes.guess_type(f"file{suffix}")
    return content_type_from_mime(mime)


def _resource_from_path(cid_path: str, hint: ContentType) -> Resource | None:
    """Build a resource from ``<cid>[/path][?query]``, or None if the CID is invalid."""
    cid_path = cid_path.split("?", 1)[0].split("#", 1)[0]
    cid, _, path = cid_path.partition("/")
    if not is_valid_cid(cid):
        return None

    if hint == ContentType.UNKNOWN and path:
        hint = content_type_from_path(path)

    url = f"ipfs://{cid}/{path}" if path else f"ipfs://{cid}"
    return Resource(cid=cid, url=url, content_type=hint)


def parse_ipfs_url(value: str, hint: ContentType = ContentType.UNKNOWN) -> Resource | None:
    """Parse an IPFS reference out of a string.

    Recognizes ``ipfs://<cid>``, any URL with a ``/ipfs/<cid>`` path segment
    (the CID ends at the next ``/`` or ``?``), and bare CIDs.

    Args:
        value: Candidate string
        hint: Content-type tag for the resulting resource

    Returns:
        Resource with a valid CID, or None if the string holds no IPFS reference
    """
    if value.startswith("ipfs://"):
        rest = value[len("ipfs://") :]
        if rest.startswith("ipfs/"):
            rest = rest[len("ipfs/") :]
        return _resource_from_path(rest, hint)

    idx = value.find("/ipfs/")
    if idx != -1:
        resource = _resource_from_path(value[idx + len("/ipfs/") :], hint)
        if resource:
            return resource

    if is_valid_cid(value):
        return Resource(cid=value, url=f"ipfs://{value}", content_type=hint)

    return None


def _well_known_candidates(document: Document) -> list[Resource]:
    candidates = []

    for field, content_type in WELL_KNOWN_FIELDS:
        value = document.get(field)
        if isinstance(value, str):
            resource = parse_ipfs_url(value, content_type)
            if resource:
                candidates.append(resource)

    properties = document.get("properties")
    files = properties.get("files") if isinstance(properties, dict) else None
    if isinstance(files, list):
        for file in files:
            if not isinstance(file, dict) or not isinstance(file.get("uri"), str):
                continue
            resource = parse_ipfs_url(file["uri"], content_type_from_mime(file.get("type")))
            if resource:
                candidates.append(resource)

    return candidates


def extract(document: Document) -> tuple[Resource, ...]:
    """Extract every IPFS resource referenced by a metadata document.

    Well-known fields are inspected first so their tags win over the
    untagged matches found by walking every string in the document.

    Args:
        document: Parsed metadata

    Returns:
        Resources unique by CID, sorted ascending by CID
    """
    candidates = _well_known_candidates(document)
    for value in iter_strings(document):
        resource = parse_ipfs_url(value)
        if resource:
            candidates.append(resource)

    unique: dict[str, Resource] = {}
    for resource in candidates:
        unique.setdefault(resource.cid, resource)

    return tuple(sorted(unique.values(), key=lambda r: r.cid))
