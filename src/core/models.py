# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# === BOOKS ===


class FileType(str, Enum):
    """Upload formats the pipeline distinguishes."""

    EPUB = "epub"
    PDF = "pdf"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | FileType | None) -> FileType:
        """Map a free-form type string ("EPUB", ".pdf", ...) to a FileType."""
        if isinstance(value, FileType):
            return value
        normalized = (value or "").strip().lower().lstrip(".")
        for member in cls:
            if member.value == normalized:
                return member
        return cls.OTHER


class BookRecord(BaseModel):
    """Stored book row, created upstream by the upload flow."""

    id: str
    title: str = "Processing..."
    author: str = "Processing..."
    description: str = ""
    cover_url: str | None = None
    file_type: FileType = FileType.EPUB
    file_path: str = ""
    uploader_id: str | None = None
    processed: bool = False
    processing_error: bool = False
    total_chapters: int = 0


class BookUpdate(BaseModel):
    """Fields the pipeline is allowed to write on a book record.

    Only fields explicitly set are persisted (see ``changes``), so a
    ``cover_url=None`` is written as a null while untouched fields stay as-is.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    author: str | None = None
    description: str | None = None
    cover_url: str | None = None
    processed: bool | None = None
    processing_error: bool | None = None
    total_chapters: int | None = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class ChapterRecord(BaseModel):
    """Stored chapter row; identity is (book_id, order_index)."""

    book_id: str
    order_index: int = Field(ge=0)
    title: str
    content: str = ""
    href: str = ""


# === PARSED CONTAINER ===


class ManifestItem(BaseModel):
    """Single manifest entry, href relative to the package document."""

    id: str
    href: str
    media_type: str = ""
    properties: list[str] = Field(default_factory=list)


class SpineItem(BaseModel):
    """Reading-order reference into the manifest."""

    idref: str
    href: str
    linear: bool = True


class NavPoint(BaseModel):
    """Table-of-contents entry with nested children."""

    label: str = ""
    href: str = ""
    children: list[NavPoint] = Field(default_factory=list)


class ParsedContainer(BaseModel):
    """In-memory view of an opened EPUB, discarded after one run."""

    base_url: str = ""
    metadata: dict[str, str | list[str]] = Field(default_factory=dict)
    manifest: dict[str, ManifestItem] = Field(default_factory=dict)
    spine: list[SpineItem] = Field(default_factory=list)
    toc: list[NavPoint] = Field(default_factory=list)
    documents: dict[str, bytes] = Field(default_factory=dict)

    def spine_item_for(self, href: str) -> SpineItem | None:
        """Find the spine entry for an href, ignoring any #fragment."""
        path = href.split("#", 1)[0]
        if not path:
            return None
        for item in self.spine:
            if item.href == path:
                return item
        return None


# === PIPELINE OUTPUTS ===


class ResolvedMetadata(BaseModel):
    """Book-level metadata after fallbacks are applied."""

    title: str
    author: str
    description: str
    cover_url: str | None = None


class ChapterDraft(BaseModel):
    """Planned chapter before its content is loaded."""

    order: int
    title: str
    href: str = ""


class ExtractedChapter(BaseModel):
    """Chapter with loaded content; load_error set when loading failed."""

    order: int
    title: str
    href: str = ""
    content: str = ""
    load_error: str | None = None

    def to_record(self, book_id: str) -> ChapterRecord:
        return ChapterRecord(
            book_id=book_id,
            order_index=self.order,
            title=self.title,
            content=self.content,
            href=self.href,
        )


class LoadedFile(BaseModel):
    """Raw bytes returned by a container loader."""

    data: bytes
    size: int
    source: str
    content_type: str | None = None
