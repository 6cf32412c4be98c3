# src/api/facade.py - v2
"""Public API facade: single entry point for book processing.

Usage:
    from bookingest.api.facade import process_book
    ok = await process_book(book_id, file_url, "epub", sink=sink)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bookingest.config.settings import Settings
from bookingest.core.models import FileType
from bookingest.pipeline.book_pipeline import BookPipeline, ProcessResult
from bookingest.storage.sink_factory import create_sink

if TYPE_CHECKING:
    from bookingest.storage.base_sink import BaseBookSink

logger = logging.getLogger(__name__)


async def run_book(
    book_id: str,
    file_url: str,
    file_type: str | FileType,
    settings: Settings | None = None,
    sink: BaseBookSink | None = None,
) -> ProcessResult:
    """Run the pipeline and return the detailed result.

    Args:
        book_id: Id of an existing, unprocessed book record.
        file_url: File URL (http/https) or storage path of the upload.
        file_type: "epub", "pdf" or anything else (placeholder branch).
        settings: Global settings. Loaded from .env if None.
        sink: Persistence sink. Built from settings if None.
    """
    settings = settings or Settings()
    sink = sink or create_sink(settings)
    pipeline = BookPipeline(sink=sink, settings=settings)
    return await pipeline.run(book_id, file_url, file_type)


async def process_book(
    book_id: str,
    file_url: str,
    file_type: str | FileType,
    settings: Settings | None = None,
    sink: BaseBookSink | None = None,
) -> bool:
    """Process an uploaded book.

    Returns:
        True if processing completed without internal errors. False still
        means the book record was written in a terminal, degraded state.
    """
    result = await run_book(book_id, file_url, file_type, settings=settings, sink=sink)
    return result.success
