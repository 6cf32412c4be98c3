# src/loader/loader_factory.py - v1
"""Factory: pick a container loader from the shape of the file location."""

from __future__ import annotations

from bookingest.config.settings import Settings
from bookingest.loader.base_loader import BaseContainerLoader
from bookingest.storage.base_sink import BaseBookSink

_HTTP_SCHEMES = ("http://", "https://")


def is_remote(location: str) -> bool:
    """True for http(s) URLs, False for storage paths."""
    return location.strip().lower().startswith(_HTTP_SCHEMES)


def create_loader(
    location: str,
    sink: BaseBookSink,
    settings: Settings | None = None,
) -> BaseContainerLoader:
    """Create the loader for a file URL or storage path.

    Args:
        location: File URL (http/https) or path inside the sink's storage.
        sink: Persistence sink, used for storage paths.
        settings: Application settings for timeouts and size limits.

    Returns:
        HttpLoader for URLs, SinkLoader otherwise.
    """
    settings = settings or Settings()

    if is_remote(location):
        from bookingest.loader.http_loader import HttpLoader
        return HttpLoader(
            probe_timeout_s=settings.http_probe_timeout_s,
            download_timeout_s=settings.http_download_timeout_s,
            max_size_bytes=settings.max_file_size_bytes,
        )

    from bookingest.loader.sink_loader import SinkLoader
    return SinkLoader(sink, max_size_bytes=settings.max_file_size_bytes)
