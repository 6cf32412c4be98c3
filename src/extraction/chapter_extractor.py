# src/extraction/chapter_extractor.py - v1
"""Chapter list derivation and content loading.

Planning is pure: table of contents first, spine fallback when the TOC is
degenerate, a single placeholder when neither yields anything. Loading
goes through the parser adapter, concurrently, with failures isolated per
chapter.
"""

from __future__ import annotations

import asyncio
import logging

from bookingest.core.errors import ChapterLoadFailedError
from bookingest.core.models import ChapterDraft, ExtractedChapter, NavPoint, ParsedContainer
from bookingest.parser.base_parser import BaseEpubParser

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Book Content"
# Front-matter heuristics applied to spine hrefs.
STYLESHEET_SUFFIX = ".css"
XHTML_SUFFIX = ".xhtml"
FRONT_MATTER_MARKERS = ("cover", "title", "copy")


def flatten_toc(points: list[NavPoint]) -> list[NavPoint]:
    """Depth-first flattening; children follow their parent."""
    flat: list[NavPoint] = []
    for point in points:
        flat.append(point)
        flat.extend(flatten_toc(point.children))
    return flat


def is_front_matter(href: str) -> bool:
    """True for stylesheets and cover/title/copyright XHTML pages."""
    if href.endswith(STYLESHEET_SUFFIX):
        return True
    return href.endswith(XHTML_SUFFIX) and any(
        marker in href for marker in FRONT_MATTER_MARKERS
    )


def plan_chapters(container: ParsedContainer) -> list[ChapterDraft]:
    """Derive the dense, zero-based chapter list for a container."""
    toc = flatten_toc(container.toc)
    if len(toc) > 1:
        logger.info("Using %d TOC entries as chapters", len(toc))
        return [
            ChapterDraft(order=i, title=point.label or f"Chapter {i + 1}", href=point.href)
            for i, point in enumerate(toc)
        ]

    logger.info(
        "TOC has %d entries, falling back to %d spine items",
        len(toc), len(container.spine),
    )
    kept = [item for item in container.spine if not is_front_matter(item.href)]
    drafts = [
        ChapterDraft(order=i, title=f"Chapter {i + 1}", href=item.href)
        for i, item in enumerate(kept)
    ]

    if not drafts:
        logger.info("No chapters in TOC or spine, creating placeholder chapter")
        drafts = [ChapterDraft(order=0, title=PLACEHOLDER_TITLE, href="")]
    return drafts


class ChapterExtractor:
    """Load chapter content through a parser adapter.

    Args:
        parser: Adapter that produced the container.
        concurrency: Maximum simultaneous chapter loads.
    """

    def __init__(self, parser: BaseEpubParser, concurrency: int = 8) -> None:
        self._parser = parser
        self._concurrency = max(1, concurrency)

    async def extract(self, container: ParsedContainer) -> list[ExtractedChapter]:
        """Plan chapters and load their content, ordered by position."""
        drafts = plan_chapters(container)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(draft: ChapterDraft) -> ExtractedChapter:
            async with semaphore:
                return await self._load(container, draft)

        chapters = await asyncio.gather(*(_bounded(d) for d in drafts))
        chapters = sorted(chapters, key=lambda c: c.order)

        failed = [c.order for c in chapters if c.load_error]
        if failed:
            logger.warning(
                "%d/%d chapters failed to load: %s", len(failed), len(chapters), failed,
            )
        return chapters

    async def _load(
        self, container: ParsedContainer, draft: ChapterDraft
    ) -> ExtractedChapter:
        chapter = ExtractedChapter(order=draft.order, title=draft.title, href=draft.href)
        if not draft.href:
            return chapter
        try:
            chapter.content = await self._parser.load_section(container, draft.href)
        except ChapterLoadFailedError as e:
            logger.error("Error loading content for chapter %d: %s", draft.order, e)
            chapter.load_error = str(e)
        except Exception as e:
            logger.error(
                "Unexpected error loading chapter %d (%s)", draft.order, draft.href,
                exc_info=True,
            )
            chapter.load_error = str(ChapterLoadFailedError(draft.href, str(e)))
        return chapter
