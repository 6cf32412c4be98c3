# src/pipeline/book_pipeline.py - v1
"""Book pipeline: top-level orchestrator for one uploaded file.

Stages:
  LOADING -> PARSING -> EXTRACTING -> PERSISTING -> DONE
with ERROR reachable from any stage. Non-EPUB uploads are never fetched:
LOADING only cleans the location before a placeholder PERSISTING branch.

Any stage failure ends in a best-effort degraded write, so a book is
never left unprocessed.
"""

from __future__ import annotations

import html
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from bookingest.config.settings import Settings
from bookingest.core.errors import IngestError
from bookingest.core.models import BookUpdate, ChapterRecord, FileType
from bookingest.extraction.chapter_extractor import PLACEHOLDER_TITLE, ChapterExtractor
from bookingest.loader.loader_factory import create_loader
from bookingest.logging.context import clear_context, set_book_context, set_stage_context
from bookingest.metadata.resolver import resolve_metadata
from bookingest.parser.parser_factory import create_parser

if TYPE_CHECKING:
    from bookingest.loader.base_loader import BaseContainerLoader
    from bookingest.parser.base_parser import BaseEpubParser
    from bookingest.storage.base_sink import BaseBookSink

logger = logging.getLogger(__name__)

EPUB_ERROR_TITLE = "Error Processing EPUB"
BOOK_ERROR_TITLE = "Error Processing Book"


class ProcessingStage(str, Enum):
    """Pipeline state machine."""

    LOADING = "loading"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    PERSISTING = "persisting"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class PlaceholderBook:
    """Generic metadata and chapter used for formats that are not parsed."""

    title: str
    author: str
    description: str
    chapter_title: str
    link_class: str
    link_text: str

    def chapter_html(self, file_url: str) -> str:
        return (
            f'<div class="{self.link_class}"><a href="{html.escape(file_url)}" '
            f'target="_blank">{self.link_text}</a></div>'
        )


PLACEHOLDERS: dict[FileType, PlaceholderBook] = {
    FileType.PDF: PlaceholderBook(
        title="PDF Document",
        author="Unknown",
        description="PDF content (view in PDF reader)",
        chapter_title="PDF Content",
        link_class="pdf-container",
        link_text="View PDF",
    ),
    FileType.OTHER: PlaceholderBook(
        title="Unknown Format Book",
        author="Unknown",
        description="This book format is not supported for full processing.",
        chapter_title="Book File",
        link_class="file-container",
        link_text="Download file",
    ),
}


@dataclass
class ProcessResult:
    """Outcome of one pipeline run."""

    book_id: str
    file_type: FileType
    run_id: str
    stage: ProcessingStage = ProcessingStage.LOADING
    stages: list[ProcessingStage] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_type: str | None = None
    chapters_persisted: int = 0
    failed_chapters: list[int] = field(default_factory=list)
    duration_ms: int = 0


class BookPipeline:
    """Process uploaded books into metadata and chapters.

    Usage:
        pipeline = BookPipeline(sink, settings)
        result = await pipeline.run("book-1", url, "epub")

    Args:
        sink: Persistence sink receiving the results.
        settings: Application settings. Loaded from .env if None.
        parser: EPUB parser adapter. Defaults to EPUB_PARSER_BACKEND.
        loader: Fixed container loader. Chosen per location if None.
    """

    def __init__(
        self,
        sink: BaseBookSink,
        settings: Settings | None = None,
        parser: BaseEpubParser | None = None,
        loader: BaseContainerLoader | None = None,
    ) -> None:
        self._sink = sink
        self._settings = settings or Settings()
        self._parser = parser or create_parser(self._settings.epub_parser_backend)
        self._loader = loader
        self._extractor = ChapterExtractor(
            self._parser, concurrency=self._settings.chapter_load_concurrency,
        )

    async def run(
        self, book_id: str, file_url: str, file_type: str | FileType
    ) -> ProcessResult:
        """Process one book. Never raises; failures are in the result."""
        start_ns = time.monotonic_ns()
        result = ProcessResult(
            book_id=book_id,
            file_type=FileType.parse(file_type),
            run_id=uuid.uuid4().hex[:12],
        )
        set_book_context(book_id, result.run_id)
        logger.info(
            "Starting processing for book %s with file type %s",
            book_id, result.file_type.value,
        )

        try:
            if result.file_type is FileType.EPUB:
                await self._process_epub(result, file_url)
            else:
                await self._process_placeholder(result, file_url)
            self._enter(result, ProcessingStage.DONE)
        except IngestError as e:
            await self._fail(result, e)
        except Exception as e:
            logger.error("Unexpected error processing book %s", book_id, exc_info=True)
            await self._fail(result, e)
        finally:
            result.duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000

        logger.info(
            "Processing finished: success=%s, stage=%s, %d chapters, %dms",
            result.success, result.stage.value, result.chapters_persisted,
            result.duration_ms,
        )
        clear_context()
        return result

    # --- Branches ---

    async def _process_epub(self, result: ProcessResult, file_url: str) -> None:
        self._enter(result, ProcessingStage.LOADING)
        loaded = await self._loader_for(file_url).load(file_url)

        self._enter(result, ProcessingStage.PARSING)
        container = await self._parser.parse(loaded.data, base_url=loaded.source)

        self._enter(result, ProcessingStage.EXTRACTING)
        metadata = resolve_metadata(container)
        chapters = await self._extractor.extract(container)
        result.failed_chapters = [c.order for c in chapters if c.load_error]

        self._enter(result, ProcessingStage.PERSISTING)
        records = [c.to_record(result.book_id) for c in chapters]
        await self._sink.insert_chapters(result.book_id, records)
        result.chapters_persisted = len(records)

        await self._sink.update_book_record(
            result.book_id,
            BookUpdate(
                processed=True,
                processing_error=False,
                title=metadata.title,
                author=metadata.author,
                description=metadata.description,
                cover_url=metadata.cover_url,
                total_chapters=len(records),
            ),
        )

    async def _process_placeholder(self, result: ProcessResult, file_url: str) -> None:
        placeholder = PLACEHOLDERS[result.file_type]

        self._enter(result, ProcessingStage.LOADING)
        location = self._loader_for(file_url).normalize_location(file_url)

        self._enter(result, ProcessingStage.PERSISTING)
        chapter = ChapterRecord(
            book_id=result.book_id,
            order_index=0,
            title=placeholder.chapter_title,
            content=placeholder.chapter_html(location),
        )
        await self._sink.insert_chapters(result.book_id, [chapter])
        result.chapters_persisted = 1

        await self._sink.update_book_record(
            result.book_id,
            BookUpdate(
                processed=True,
                processing_error=False,
                title=placeholder.title,
                author=placeholder.author,
                description=placeholder.description,
                total_chapters=1,
            ),
        )

    # --- State machine ---

    def _enter(self, result: ProcessResult, stage: ProcessingStage) -> None:
        result.stage = stage
        result.stages.append(stage)
        set_stage_context(stage.value)
        logger.debug("Entering stage %s", stage.value)

    async def _fail(self, result: ProcessResult, error: Exception) -> None:
        """Record the failure and write a degraded, terminal book state."""
        failed_stage = result.stage
        result.success = False
        result.error = str(error)
        result.error_type = type(error).__name__
        self._enter(result, ProcessingStage.ERROR)
        logger.error(
            "Processing failed during %s: %s: %s",
            failed_stage.value, result.error_type, error,
        )

        if result.chapters_persisted == 0:
            placeholder = ChapterRecord(
                book_id=result.book_id, order_index=0, title=PLACEHOLDER_TITLE,
            )
            try:
                await self._sink.insert_chapters(result.book_id, [placeholder])
                result.chapters_persisted = 1
            except Exception:
                logger.error("Could not write placeholder chapter", exc_info=True)

        fields: dict[str, object] = {
            "processed": True,
            "processing_error": True,
            "title": (
                EPUB_ERROR_TITLE if result.file_type is FileType.EPUB else BOOK_ERROR_TITLE
            ),
        }
        if result.chapters_persisted:
            fields["total_chapters"] = result.chapters_persisted
        try:
            await self._sink.update_book_record(result.book_id, BookUpdate(**fields))
        except Exception:
            logger.error(
                "Degraded write failed, book %s may stay unprocessed",
                result.book_id, exc_info=True,
            )

    def _loader_for(self, file_url: str) -> BaseContainerLoader:
        if self._loader is not None:
            return self._loader
        return create_loader(file_url, self._sink, self._settings)
