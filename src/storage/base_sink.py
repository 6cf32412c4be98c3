# src/storage/base_sink.py - v1
"""Abstract persistence sink interface.

The pipeline reads the source file and writes its results only through
this interface; concrete backends are chosen by sink_factory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookingest.core.models import BookRecord, BookUpdate, ChapterRecord


class BaseBookSink(ABC):
    """Unified interface for book storage backends."""

    # --- Pipeline contract ---

    @abstractmethod
    async def get_file(self, path: str) -> bytes:
        """Read the raw bytes of an uploaded file."""

    @abstractmethod
    async def file_exists(self, path: str) -> bool:
        """Check whether an uploaded file is present."""

    @abstractmethod
    async def update_book_record(self, book_id: str, update: BookUpdate) -> None:
        """Apply the explicitly set fields of ``update`` to a book."""

    @abstractmethod
    async def insert_chapters(
        self, book_id: str, chapters: list[ChapterRecord]
    ) -> None:
        """Store a book's chapter list, keyed by (book_id, order_index).

        Existing rows at the same keys are replaced and rows past the last
        given order_index are removed, so re-processing never leaves a
        stale tail. An empty list changes nothing.
        """

    # --- Upstream / inspection helpers ---

    @abstractmethod
    async def create_book(self, record: BookRecord) -> None:
        """Create a book record (normally done by the upload flow)."""

    @abstractmethod
    async def get_book(self, book_id: str) -> BookRecord | None:
        """Fetch a book record, or None if missing."""

    @abstractmethod
    async def list_chapters(self, book_id: str) -> list[ChapterRecord]:
        """List a book's chapters ordered by order_index."""
