# src/parser/base_parser.py - v1
"""Abstract EPUB parser adapter.

Isolates the third-party EPUB library so the rest of the pipeline only
sees a ParsedContainer. Swapping libraries means adding an adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookingest.core.models import ParsedContainer


class BaseEpubParser(ABC):
    """Unified interface for EPUB parsing backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name used by the parser registry (e.g. 'ebooklib')."""

    @abstractmethod
    async def parse(self, data: bytes, base_url: str = "") -> ParsedContainer:
        """Open an EPUB held in memory.

        Raises:
            ParseFailedError: If the container cannot be opened.
        """

    @abstractmethod
    async def load_section(self, container: ParsedContainer, href: str) -> str:
        """Return raw HTML for the spine document an href points into.

        An href that matches no spine item yields an empty string.

        Raises:
            ChapterLoadFailedError: If the document exists but cannot be read.
        """
