# src/parser/ebooklib_parser.py - v1
"""EPUB parser adapter using ebooklib.

Normalizes ebooklib's book object into a ParsedContainer: Dublin Core
metadata, manifest keyed by id, spine hrefs, nested TOC and the raw bytes
of every spine document. Requires 'ebooklib' and 'beautifulsoup4'.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
import tempfile
import warnings
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from bookingest.core.errors import ChapterLoadFailedError, ParseFailedError
from bookingest.core.models import ManifestItem, NavPoint, ParsedContainer, SpineItem
from bookingest.parser.base_parser import BaseEpubParser

logger = logging.getLogger(__name__)

# EPUB chapters are XHTML; html.parser handles them fine.
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

DC_FIELDS = (
    "title", "creator", "description", "subject", "publisher",
    "date", "rights", "language", "identifier",
)
COVER_IMAGE_PROPERTY = "cover-image"


class EbookLibParser(BaseEpubParser):
    """Adapter over ``ebooklib.epub.read_epub``."""

    @property
    def name(self) -> str:
        return "ebooklib"

    async def parse(self, data: bytes, base_url: str = "") -> ParsedContainer:
        """Open the EPUB and normalize it.

        Any exception raised while ebooklib opens the file is the
        library's "open failed" signal and becomes ParseFailedError.
        """
        if not data:
            raise ParseFailedError("EPUB payload is empty")
        try:
            book = await asyncio.to_thread(self._read_book, data)
        except Exception as e:
            logger.error("EPUB open failed: %s", e)
            raise ParseFailedError(f"EPUB open failed: {e}") from e

        try:
            container = self._normalize(book, base_url)
        except Exception as e:
            raise ParseFailedError(f"EPUB structure unreadable: {e}") from e

        logger.info(
            "Parsed EPUB: %d manifest items, %d spine items, %d TOC entries",
            len(container.manifest), len(container.spine), len(container.toc),
        )
        return container

    async def load_section(self, container: ParsedContainer, href: str) -> str:
        item = container.spine_item_for(href)
        if item is None:
            logger.debug("No spine section for %r", href)
            return ""

        raw = container.documents.get(item.href)
        if raw is None:
            raise ChapterLoadFailedError(href, "document missing from container")

        try:
            return await asyncio.to_thread(_render_section, raw)
        except Exception as e:
            raise ChapterLoadFailedError(href, str(e)) from e

    # --- ebooklib access ---

    @staticmethod
    def _read_book(data: bytes) -> epub.EpubBook:
        """ebooklib reads from a path, so spill the bytes to a temp file."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "upload.epub"
            path.write_bytes(data)
            return epub.read_epub(str(path))

    def _normalize(self, book: epub.EpubBook, base_url: str) -> ParsedContainer:
        manifest: dict[str, ManifestItem] = {}
        for item in book.get_items():
            item_id = item.get_id()
            if not item_id:
                continue
            properties = list(getattr(item, "properties", None) or [])
            # ebooklib turns cover-image items into EpubCover and drops the property.
            if isinstance(item, epub.EpubCover) and COVER_IMAGE_PROPERTY not in properties:
                properties.append(COVER_IMAGE_PROPERTY)
            manifest[item_id] = ManifestItem(
                id=item_id,
                href=item.get_name(),
                media_type=item.media_type or "",
                properties=properties,
            )

        spine: list[SpineItem] = []
        documents: dict[str, bytes] = {}
        for entry in book.spine:
            idref, linear = entry if isinstance(entry, tuple) else (entry, "yes")
            manifest_item = manifest.get(idref)
            if manifest_item is None:
                logger.debug("Spine idref %r not in manifest, skipped", idref)
                continue
            spine.append(SpineItem(
                idref=idref,
                href=manifest_item.href,
                linear=str(linear).lower() != "no",
            ))
            epub_item = book.get_item_with_id(idref)
            if epub_item is not None:
                documents[manifest_item.href] = _raw_content(epub_item)

        known_hrefs = {m.href for m in manifest.values()}
        nav_dir = self._navigation_dir(book)

        return ParsedContainer(
            base_url=base_url,
            metadata=self._metadata(book),
            manifest=manifest,
            spine=spine,
            toc=self._convert_toc(book.toc, nav_dir, known_hrefs),
            documents=documents,
        )

    def _metadata(self, book: epub.EpubBook) -> dict[str, str | list[str]]:
        """Dublin Core values: one value -> str, several -> list."""
        metadata: dict[str, str | list[str]] = {}
        for field in DC_FIELDS:
            values = _dc_values(book, field)
            if len(values) == 1:
                metadata[field] = values[0]
            elif values:
                metadata[field] = values

        cover_id = _cover_meta_id(book)
        if cover_id:
            metadata["cover"] = cover_id
        return metadata

    @staticmethod
    def _navigation_dir(book: epub.EpubBook) -> str:
        for item in book.get_items_of_type(ebooklib.ITEM_NAVIGATION):
            return posixpath.dirname(item.get_name())
        return ""

    def _convert_toc(
        self, entries: Any, nav_dir: str, known_hrefs: set[str]
    ) -> list[NavPoint]:
        points: list[NavPoint] = []
        for entry in entries or []:
            if _is_section(entry):
                section, children = entry
                points.append(NavPoint(
                    label=_text(getattr(section, "title", "")),
                    href=_resolve_href(getattr(section, "href", "") or "", nav_dir, known_hrefs),
                    children=self._convert_toc(children, nav_dir, known_hrefs),
                ))
            elif isinstance(entry, (list, tuple)):
                points.extend(self._convert_toc(entry, nav_dir, known_hrefs))
            else:
                points.append(NavPoint(
                    label=_text(getattr(entry, "title", "")),
                    href=_resolve_href(getattr(entry, "href", "") or "", nav_dir, known_hrefs),
                ))
        return points


def _is_section(entry: Any) -> bool:
    return (
        isinstance(entry, tuple)
        and len(entry) == 2
        and isinstance(entry[1], (list, tuple))
    )


def _render_section(raw: bytes) -> str:
    """Parse a spine document and return its <html> element as markup."""
    soup = BeautifulSoup(raw.decode("utf-8", errors="replace"), "html.parser")
    root = soup.find("html")
    return str(root if root is not None else soup)


def _raw_content(item: Any) -> bytes:
    """Bytes as stored in the archive; EpubHtml.get_content() re-renders."""
    raw = getattr(item, "content", None) or item.get_content()
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return raw or b""


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    return str(value).strip()


def _dc_values(book: epub.EpubBook, field: str) -> list[str]:
    try:
        entries = book.get_metadata("DC", field)
    except KeyError:
        return []
    values = [_text(value) for value, _attrs in entries]
    return [v for v in values if v]


def _cover_meta_id(book: epub.EpubBook) -> str:
    """Find ``<meta name="cover" content="...">`` in any namespace."""
    for names in book.metadata.values():
        for name, entries in names.items():
            for value, attrs in entries:
                attrs = attrs or {}
                if attrs.get("name") == "cover" and attrs.get("content"):
                    return _text(attrs["content"])
                if name == "cover" and _text(value):
                    return _text(value)
    return ""


def _resolve_href(href: str, nav_dir: str, known_hrefs: set[str]) -> str:
    """Express a TOC href relative to the package document.

    ebooklib already resolves nav-document links but leaves NCX links
    relative to the NCX file, so join only when the raw path is unknown.
    """
    if not href:
        return ""
    path, sep, fragment = unquote(href).partition("#")
    if path and path not in known_hrefs and nav_dir:
        joined = posixpath.normpath(posixpath.join(nav_dir, path))
        if joined in known_hrefs:
            path = joined
    return f"{path}{sep}{fragment}"
