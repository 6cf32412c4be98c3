# src/storage/sink_factory.py - v1
"""Factory: instantiate the persistence sink from configuration."""

from __future__ import annotations

from bookingest.config.settings import Settings
from bookingest.storage.base_sink import BaseBookSink


def create_sink(settings: Settings | None = None) -> BaseBookSink:
    """Create the sink selected by SINK_BACKEND.

    Args:
        settings: Application settings. Defaults to the in-memory sink.

    Returns:
        BaseBookSink instance.

    Raises:
        ValueError: If the backend is not supported.
    """
    backend = "memory" if settings is None else settings.sink_backend

    if backend == "memory":
        from bookingest.storage.memory_sink import MemorySink
        return MemorySink()

    if backend == "sqlite":
        from bookingest.storage.sqlite_sink import SqliteSink
        return SqliteSink(
            db_path=settings.sqlite_db_path,
            files_root=settings.files_root,
        )

    raise ValueError(f"Unsupported sink backend: {backend!r}")
