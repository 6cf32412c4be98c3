# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides sample parsed containers, an in-memory sink with a registered
book, and a factory writing small EPUB files with ebooklib.
No network access; HTTP sessions are mocked where needed.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from ebooklib import epub

from bookingest.config.settings import Settings
from bookingest.core.models import (
    BookRecord,
    FileType,
    ManifestItem,
    NavPoint,
    ParsedContainer,
    SpineItem,
)
from bookingest.storage.memory_sink import MemorySink

# Smallest valid JPEG header; ebooklib does not decode images.
FAKE_JPEG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


# === FIXTURES: Settings and sinks ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        sink_backend="memory",
        sqlite_db_path=tmp_path / "books.db",
        files_root=tmp_path / "files",
    )


@pytest.fixture
def memory_sink() -> MemorySink:
    """Sink holding one unprocessed EPUB book with id 'book-1'."""
    sink = MemorySink()
    sink.books["book-1"] = BookRecord(
        id="book-1", file_type=FileType.EPUB, file_path="uploads/book.epub",
    )
    return sink


# === FIXTURES: Parsed containers ===


def _xhtml(title: str, body: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml"><head>'
        f"<title>{title}</title></head><body>{body}</body></html>"
    ).encode("utf-8")


@pytest.fixture
def sample_container() -> ParsedContainer:
    """Three-chapter container with a nested TOC and a cover image."""
    hrefs = ["text/ch1.xhtml", "text/ch2.xhtml", "text/ch3.xhtml"]
    manifest = {
        f"ch{i + 1}": ManifestItem(
            id=f"ch{i + 1}", href=href, media_type="application/xhtml+xml",
        )
        for i, href in enumerate(hrefs)
    }
    manifest["cover-img"] = ManifestItem(
        id="cover-img", href="images/cover.jpg", media_type="image/jpeg",
    )
    return ParsedContainer(
        base_url="https://files.example.com/books/book.epub",
        metadata={
            "title": "A Sample Book",
            "creator": ["Ada Writer", "Bob Editor"],
            "description": "A book used in tests.",
            "cover": "cover-img",
        },
        manifest=manifest,
        spine=[
            SpineItem(idref=f"ch{i + 1}", href=href) for i, href in enumerate(hrefs)
        ],
        toc=[
            NavPoint(
                label="Part One",
                href="text/ch1.xhtml",
                children=[NavPoint(label="Second", href="text/ch2.xhtml#s2")],
            ),
            NavPoint(label="", href="text/ch3.xhtml"),
        ],
        documents={
            href: _xhtml(f"Chapter {i + 1}", f"<p>Body of chapter {i + 1}.</p>")
            for i, href in enumerate(hrefs)
        },
    )


# === FIXTURES: EPUB files ===


EpubFactory = Callable[..., bytes]


@pytest.fixture
def epub_factory(tmp_path: Path) -> EpubFactory:
    """Build EPUB bytes with ebooklib.

    Usage:
        data = epub_factory(chapters=[("Intro", "<p>Hi</p>")], toc=True)
    """
    counter = {"n": 0}

    def _build(
        title: str | None = "My Fake Book",
        authors: tuple[str, ...] = ("Dr. Seuss",),
        chapters: list[tuple[str, str]] | None = None,
        toc: bool = True,
        description: str | None = None,
        subjects: tuple[str, ...] = (),
        cover: bool = False,
    ) -> bytes:
        chapters = chapters if chapters is not None else [
            ("Introduction", "<h1>Chapter 1</h1><p>This is a test.</p>"),
        ]
        book = epub.EpubBook()
        book.set_identifier("id123456")
        if title is not None:
            book.set_title(title)
        book.set_language("en")
        for author in authors:
            book.add_author(author)
        if description is not None:
            book.add_metadata("DC", "description", description)
        for subject in subjects:
            book.add_metadata("DC", "subject", subject)
        if cover:
            book.set_cover("images/cover.jpg", FAKE_JPEG, create_page=False)

        items = []
        for i, (chapter_title, body) in enumerate(chapters, start=1):
            item = epub.EpubHtml(
                title=chapter_title, file_name=f"chap_{i:02d}.xhtml",
                lang="en", uid=f"chap_{i:02d}",
            )
            item.content = f"<html><body>{body}</body></html>"
            book.add_item(item)
            items.append(item)

        if toc:
            book.toc = tuple(
                epub.Link(item.file_name, chapter_title, item.id)
                for item, (chapter_title, _body) in zip(items, chapters)
            )
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", *items]

        counter["n"] += 1
        path = tmp_path / f"fake_book_{counter['n']}.epub"
        epub.write_epub(str(path), book, {})
        return path.read_bytes()

    return _build
