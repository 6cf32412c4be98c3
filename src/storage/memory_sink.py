# src/storage/memory_sink.py - v1
"""In-process sink (SINK_BACKEND=memory), used for tests and dry runs."""

from __future__ import annotations

import logging

from bookingest.core.errors import PersistenceFailedError
from bookingest.core.models import BookRecord, BookUpdate, ChapterRecord
from bookingest.storage.base_sink import BaseBookSink

logger = logging.getLogger(__name__)


class MemorySink(BaseBookSink):
    """Dict-backed sink. Files are registered with ``add_file``."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.books: dict[str, BookRecord] = {}
        self.chapters: dict[str, dict[int, ChapterRecord]] = {}

    def add_file(self, path: str, data: bytes) -> None:
        self.files[path] = data

    async def get_file(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise PersistenceFailedError(f"File not found: {path}") from None

    async def file_exists(self, path: str) -> bool:
        return path in self.files

    async def update_book_record(self, book_id: str, update: BookUpdate) -> None:
        record = self.books.get(book_id)
        if record is None:
            raise PersistenceFailedError(f"Book not found: {book_id}")
        self.books[book_id] = record.model_copy(update=update.changes())

    async def insert_chapters(
        self, book_id: str, chapters: list[ChapterRecord]
    ) -> None:
        rows = self.chapters.setdefault(book_id, {})
        for chapter in chapters:
            if chapter.book_id != book_id:
                raise PersistenceFailedError(
                    f"Chapter belongs to {chapter.book_id!r}, not {book_id!r}"
                )
            rows[chapter.order_index] = chapter
        if chapters:
            end = max(c.order_index for c in chapters) + 1
            for stale in [k for k in rows if k >= end]:
                del rows[stale]
        logger.debug("Stored %d chapters for book %s", len(chapters), book_id)

    async def create_book(self, record: BookRecord) -> None:
        self.books[record.id] = record

    async def get_book(self, book_id: str) -> BookRecord | None:
        return self.books.get(book_id)

    async def list_chapters(self, book_id: str) -> list[ChapterRecord]:
        rows = self.chapters.get(book_id, {})
        return [rows[k] for k in sorted(rows)]
