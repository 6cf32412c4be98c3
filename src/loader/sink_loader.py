# src/loader/sink_loader.py - v1
"""Container loader reading uploads through the persistence sink."""

from __future__ import annotations

from bookingest.core.errors import DownloadFailedError, NotAccessibleError, PersistenceFailedError
from bookingest.core.models import LoadedFile
from bookingest.loader.base_loader import BaseContainerLoader
from bookingest.storage.base_sink import BaseBookSink


class SinkLoader(BaseContainerLoader):
    """Load a storage path via ``sink.file_exists`` / ``sink.get_file``."""

    def __init__(self, sink: BaseBookSink, max_size_bytes: int | None = None) -> None:
        super().__init__(max_size_bytes=max_size_bytes)
        self._sink = sink

    async def probe(self, location: str) -> None:
        if not await self._sink.file_exists(location):
            raise NotAccessibleError(location, "not found in storage")

    async def fetch(self, location: str) -> LoadedFile:
        try:
            data = await self._sink.get_file(location)
        except PersistenceFailedError as e:
            raise DownloadFailedError(f"Storage download error: {e}") from e
        return LoadedFile(data=data, size=len(data), source=location)
