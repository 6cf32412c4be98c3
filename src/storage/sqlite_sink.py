# src/storage/sqlite_sink.py - v1
"""SQLite-based sink (SINK_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Book and chapter rows live
in one database file; uploaded files are read from a local files root.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from bookingest.core.errors import PersistenceFailedError
from bookingest.core.models import BookRecord, BookUpdate, ChapterRecord, FileType
from bookingest.storage.base_sink import BaseBookSink

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    cover_url TEXT,
    file_type TEXT NOT NULL,
    file_path TEXT NOT NULL DEFAULT '',
    uploader_id TEXT,
    processed INTEGER NOT NULL DEFAULT 0,
    processing_error INTEGER NOT NULL DEFAULT 0,
    total_chapters INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS chapters (
    book_id TEXT NOT NULL,
    order_index INTEGER NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    href TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (book_id, order_index)
);
"""

_BOOK_COLUMNS = (
    "id", "title", "author", "description", "cover_url", "file_type",
    "file_path", "uploader_id", "processed", "processing_error", "total_chapters",
)


class SqliteSink(BaseBookSink):
    """SQLite-backed book and chapter store."""

    def __init__(self, db_path: Path | str, files_root: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._files_root = Path(files_root).expanduser()
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def _resolve(self, path: str) -> Path:
        p = Path(path).expanduser()
        return p if p.is_absolute() else self._files_root / p

    async def get_file(self, path: str) -> bytes:
        try:
            return self._resolve(path).read_bytes()
        except OSError as e:
            raise PersistenceFailedError(f"Cannot read file {path}: {e}") from e

    async def file_exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def update_book_record(self, book_id: str, update: BookUpdate) -> None:
        changes = update.changes()
        if not changes:
            return
        assignments = ", ".join(f"{column} = ?" for column in changes)
        try:
            cursor = self._conn.execute(
                f"UPDATE books SET {assignments} WHERE id = ?",  # noqa: S608
                (*changes.values(), book_id),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise PersistenceFailedError(f"Book update failed for {book_id}: {e}") from e
        if cursor.rowcount == 0:
            raise PersistenceFailedError(f"Book not found: {book_id}")

    async def insert_chapters(
        self, book_id: str, chapters: list[ChapterRecord]
    ) -> None:
        """Upsert chapters and drop rows past the new last one, in one transaction."""
        if not chapters:
            return
        rows = [
            (book_id, c.order_index, c.title, c.content, c.href) for c in chapters
        ]
        end = max(c.order_index for c in chapters) + 1
        try:
            with self._conn:
                self._conn.executemany(
                    """INSERT OR REPLACE INTO chapters
                       (book_id, order_index, title, content, href)
                       VALUES (?, ?, ?, ?, ?)""",
                    rows,
                )
                self._conn.execute(
                    "DELETE FROM chapters WHERE book_id = ? AND order_index >= ?",
                    (book_id, end),
                )
        except sqlite3.Error as e:
            raise PersistenceFailedError(
                f"Chapter insert failed for {book_id}: {e}"
            ) from e
        logger.debug("Stored %d chapters for book %s", len(rows), book_id)

    async def create_book(self, record: BookRecord) -> None:
        data = record.model_dump()
        data["file_type"] = record.file_type.value
        placeholders = ", ".join("?" for _ in _BOOK_COLUMNS)
        try:
            self._conn.execute(
                f"INSERT INTO books ({', '.join(_BOOK_COLUMNS)}) "  # noqa: S608
                f"VALUES ({placeholders})",
                tuple(data[column] for column in _BOOK_COLUMNS),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise PersistenceFailedError(f"Book insert failed for {record.id}: {e}") from e

    async def get_book(self, book_id: str) -> BookRecord | None:
        cursor = self._conn.execute(
            f"SELECT {', '.join(_BOOK_COLUMNS)} FROM books WHERE id = ?",  # noqa: S608
            (book_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        data = dict(zip(_BOOK_COLUMNS, row))
        data["file_type"] = FileType.parse(data["file_type"])
        data["processed"] = bool(data["processed"])
        data["processing_error"] = bool(data["processing_error"])
        return BookRecord(**data)

    async def list_chapters(self, book_id: str) -> list[ChapterRecord]:
        cursor = self._conn.execute(
            """SELECT order_index, title, content, href FROM chapters
               WHERE book_id = ? ORDER BY order_index""",
            (book_id,),
        )
        return [
            ChapterRecord(
                book_id=book_id,
                order_index=row[0],
                title=row[1],
                content=row[2],
                href=row[3],
            )
            for row in cursor.fetchall()
        ]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
