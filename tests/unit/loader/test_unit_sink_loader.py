# tests/unit/loader/test_unit_sink_loader.py - v1
"""Tests for loader/sink_loader.py and loader/loader_factory.py."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from bookingest.core.errors import DownloadFailedError, NotAccessibleError, PersistenceFailedError
from bookingest.loader.http_loader import HttpLoader
from bookingest.loader.loader_factory import create_loader, is_remote
from bookingest.loader.sink_loader import SinkLoader
from bookingest.storage.memory_sink import MemorySink


@pytest.mark.asyncio
class TestSinkLoader:
    async def test_load_from_storage(self):
        sink = MemorySink()
        sink.add_file("uploads/my book.epub", b"epub")
        loaded = await SinkLoader(sink).load(" uploads/my book.epub ")
        assert loaded.data == b"epub"
        assert loaded.source == "uploads/my book.epub"

    async def test_missing_file(self):
        with pytest.raises(NotAccessibleError, match="not found in storage"):
            await SinkLoader(MemorySink()).load("uploads/none.epub")

    async def test_storage_error_becomes_download_error(self):
        sink = AsyncMock()
        sink.file_exists.return_value = True
        sink.get_file.side_effect = PersistenceFailedError("disk gone")
        with pytest.raises(DownloadFailedError, match="Storage download error"):
            await SinkLoader(sink).load("uploads/x.epub")

    async def test_size_limit(self):
        sink = MemorySink()
        sink.add_file("big.epub", b"x" * 50)
        with pytest.raises(DownloadFailedError):
            await SinkLoader(sink, max_size_bytes=10).load("big.epub")


class TestLoaderFactory:
    @pytest.mark.parametrize("location,expected", [
        ("https://a/b.epub", True),
        ("HTTP://a/b.epub", True),
        ("  http://a/b.epub", True),
        ("uploads/b.epub", False),
        ("/abs/b.epub", False),
    ])
    def test_is_remote(self, location, expected):
        assert is_remote(location) is expected

    def test_http_loader_for_urls(self, settings):
        loader = create_loader("https://a/b.epub", MemorySink(), settings)
        assert isinstance(loader, HttpLoader)

    def test_sink_loader_for_paths(self, settings):
        assert isinstance(create_loader("uploads/b.epub", MemorySink(), settings), SinkLoader)
