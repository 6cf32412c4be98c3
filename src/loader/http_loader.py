# src/loader/http_loader.py - v1
"""HTTP(S) container loader built on requests.

The accessibility probe is a HEAD request. Blocking calls run in a worker
thread so concurrent uploads do not stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging

import requests

from bookingest.core.errors import DownloadFailedError, FileTooLargeError, NotAccessibleError
from bookingest.core.models import LoadedFile
from bookingest.loader.base_loader import BaseContainerLoader, clean_location

logger = logging.getLogger(__name__)


class HttpLoader(BaseContainerLoader):
    """Fetch uploaded files from a public or signed URL."""

    def __init__(
        self,
        session: requests.Session | None = None,
        probe_timeout_s: float = 10.0,
        download_timeout_s: float = 60.0,
        max_size_bytes: int | None = None,
    ) -> None:
        super().__init__(max_size_bytes=max_size_bytes)
        self._session = session or requests.Session()
        self._probe_timeout_s = probe_timeout_s
        self._download_timeout_s = download_timeout_s

    def normalize_location(self, location: str) -> str:
        return clean_location(location)

    async def probe(self, location: str) -> None:
        try:
            response = await asyncio.to_thread(
                self._session.head,
                location,
                allow_redirects=True,
                timeout=self._probe_timeout_s,
            )
        except requests.RequestException as e:
            raise NotAccessibleError(location, f"probe error: {e}") from e

        if not response.ok:
            raise NotAccessibleError(
                location, f"{response.status_code} {response.reason}"
            )

        declared = response.headers.get("Content-Length")
        if declared and declared.isdigit() and self._max_size_bytes is not None:
            if int(declared) > self._max_size_bytes:
                raise FileTooLargeError(int(declared), self._max_size_bytes)
        logger.debug("Probe ok: %s (%s)", location, response.status_code)

    async def fetch(self, location: str) -> LoadedFile:
        try:
            response = await asyncio.to_thread(
                self._session.get, location, timeout=self._download_timeout_s,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadFailedError(f"Download failed for {location}: {e}") from e

        data = response.content
        return LoadedFile(
            data=data,
            size=len(data),
            source=location,
            content_type=response.headers.get("Content-Type"),
        )
