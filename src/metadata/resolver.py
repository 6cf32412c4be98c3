# src/metadata/resolver.py - v1
"""Book metadata resolution with ordered fallbacks.

Pure function over a ParsedContainer. The fallback strings are product
decisions and are stored verbatim on the book record.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

from bookingest.core.models import ManifestItem, ParsedContainer, ResolvedMetadata

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"
NO_DESCRIPTION = "No description available."
COVER_MARKER = "cover"
COVER_IMAGE_PROPERTY = "cover-image"


def resolve_metadata(container: ParsedContainer) -> ResolvedMetadata:
    """Resolve title, author, description and cover URL."""
    metadata = container.metadata
    resolved = ResolvedMetadata(
        title=resolve_title(metadata),
        author=resolve_author(metadata),
        description=resolve_description(metadata),
        cover_url=resolve_cover_url(container),
    )
    logger.info(
        "Resolved metadata: title=%r, author=%r, cover=%s",
        resolved.title, resolved.author, resolved.cover_url or "none",
    )
    return resolved


def resolve_title(metadata: dict[str, str | list[str]]) -> str:
    return _first(metadata.get("title")) or UNKNOWN_TITLE


def resolve_author(metadata: dict[str, str | list[str]]) -> str:
    creator = metadata.get("creator")
    if isinstance(creator, list):
        joined = ", ".join(c for c in creator if c)
        return joined or UNKNOWN_AUTHOR
    return creator or UNKNOWN_AUTHOR


def resolve_description(metadata: dict[str, str | list[str]]) -> str:
    """First non-empty of: description, subjects, publishing facts, literal."""
    description = metadata.get("description")
    if isinstance(description, list):
        description = description[0] if description else None
    if description and description.strip():
        return description

    subject = metadata.get("subject")
    if isinstance(subject, list) and subject:
        return f"Categories: {', '.join(subject)}"
    if isinstance(subject, str) and subject:
        return f"Category: {subject}"

    publisher = _first(metadata.get("publisher"))
    date = _first(metadata.get("date"))
    rights = _first(metadata.get("rights"))
    synthesized = (
        (f"Published by {publisher}. " if publisher else "")
        + (f"Published on {date}. " if date else "")
        + (rights or "")
    ).strip()
    return synthesized or NO_DESCRIPTION


def find_cover_item(container: ParsedContainer) -> ManifestItem | None:
    """Locate the cover manifest entry.

    Order: id "cover"; id named by the cover meta; any image whose id or
    href contains "cover"; any item declaring the cover-image property.
    """
    manifest = container.manifest

    item = manifest.get(COVER_MARKER)
    if item is not None and item.href:
        return item

    cover_id = _first(container.metadata.get("cover"))
    if cover_id:
        item = manifest.get(cover_id)
        if item is not None and item.href:
            return item

    for key, item in manifest.items():
        named_cover = (
            COVER_MARKER in key.lower() or COVER_MARKER in item.href.lower()
        )
        if named_cover and item.media_type.startswith("image/"):
            return item

    for item in manifest.values():
        if COVER_IMAGE_PROPERTY in item.properties and item.href:
            return item

    return None


def resolve_cover_url(container: ParsedContainer) -> str | None:
    item = find_cover_item(container)
    if item is None:
        return None
    return absolutize(item.href, container.base_url)


def absolutize(href: str, base_url: str) -> str:
    """Resolve a container-relative href against the source file location.

    Absolute http(s) bases use URL resolution; anything else falls back
    to joining onto the base's directory.
    """
    if href.startswith("http") or not base_url:
        return href

    parts = urlsplit(base_url)
    if parts.scheme and parts.netloc:
        try:
            return urljoin(base_url, href)
        except ValueError:
            logger.debug("URL resolution failed for %r, joining paths", href)

    head, sep, _filename = base_url.rpartition("/")
    return f"{head}/{href.lstrip('/')}" if sep else href.lstrip("/")


def _first(value: str | list[str] | None) -> str:
    if isinstance(value, list):
        return value[0] if value else ""
    return value or ""
