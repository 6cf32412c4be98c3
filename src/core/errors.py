# src/core/errors.py - v1
"""Exception hierarchy for the ingestion pipeline.

Stage-level errors are fatal for a run and are converted by the
orchestrator into a degraded book record. ChapterLoadFailedError is the
only per-item error and is recovered inside the chapter extractor.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for all pipeline errors."""


class NotAccessibleError(IngestError):
    """The accessibility probe for the source file failed."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"File not accessible: {reason} ({location})")


class DownloadFailedError(IngestError):
    """Transfer of the source file failed after a successful probe."""


class FileTooLargeError(DownloadFailedError):
    """Source file exceeds the configured maximum size."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"File too large: {size} bytes (limit {limit} bytes)")


class ParseFailedError(IngestError):
    """The EPUB container could not be opened or read."""


class ChapterLoadFailedError(IngestError):
    """Content of a single chapter could not be loaded."""

    def __init__(self, href: str, reason: str) -> None:
        self.href = href
        self.reason = reason
        super().__init__(f"Chapter {href!r} failed to load: {reason}")


class PersistenceFailedError(IngestError):
    """The persistence sink rejected a read or write."""
