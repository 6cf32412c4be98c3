# src/loader/base_loader.py - v1
"""Abstract container loader interface.

A loader probes a location cheaply before committing to a full download,
then validates the payload size. Nothing is retried here.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

from bookingest.core.errors import DownloadFailedError, FileTooLargeError
from bookingest.core.models import LoadedFile

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")


def clean_location(location: str) -> str:
    """Percent-encode whitespace in a file URL or storage path."""
    return _WHITESPACE.sub("%20", location.strip())


class BaseContainerLoader(ABC):
    """Unified interface for fetching uploaded files."""

    def __init__(self, max_size_bytes: int | None = None) -> None:
        self._max_size_bytes = max_size_bytes

    def normalize_location(self, location: str) -> str:
        return location.strip()

    @abstractmethod
    async def probe(self, location: str) -> None:
        """Check the file is reachable.

        Raises:
            NotAccessibleError: If the probe fails.
        """

    @abstractmethod
    async def fetch(self, location: str) -> LoadedFile:
        """Download the file into memory.

        Raises:
            DownloadFailedError: If the transfer fails.
        """

    async def load(self, location: str) -> LoadedFile:
        """Probe, fetch and validate a file."""
        location = self.normalize_location(location)
        await self.probe(location)
        loaded = await self.fetch(location)
        self._check_size(loaded.size)
        logger.info(
            "Loaded %s (%.2f KB)", loaded.source, loaded.size / 1024,
        )
        return loaded

    def _check_size(self, size: int) -> None:
        if size <= 0:
            raise DownloadFailedError("Downloaded file is empty")
        if self._max_size_bytes is not None and size > self._max_size_bytes:
            raise FileTooLargeError(size, self._max_size_bytes)
