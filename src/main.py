# src/main.py - v2
"""CLI entry point: register, process, show commands.

Usage:
    bookingest register <book_id> <file_path> [--type T] [--uploader U]
    bookingest process <book_id> <file_url> [--type T]
    bookingest show <book_id> [--with-content]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from bookingest import __version__

if TYPE_CHECKING:
    from bookingest.pipeline.book_pipeline import ProcessResult

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="bookingest",
        description=f"bookingest v{__version__}, EPUB ingestion pipeline",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- register ---
    p_register = subparsers.add_parser(
        "register", help="Create an unprocessed book record",
    )
    p_register.add_argument("book_id", help="Book identifier")
    p_register.add_argument("file_path", help="Storage path or URL of the file")
    p_register.add_argument(
        "-t", "--type", dest="file_type", default=None,
        help="File type: epub, pdf, other (default: from extension)",
    )
    p_register.add_argument(
        "--uploader", default=None, help="Uploader identifier",
    )
    p_register.set_defaults(func=_cmd_register)

    # --- process ---
    p_process = subparsers.add_parser(
        "process", help="Process a registered book",
    )
    p_process.add_argument("book_id", help="Book identifier")
    p_process.add_argument("file_url", help="Storage path or http(s) URL")
    p_process.add_argument(
        "-t", "--type", dest="file_type", default=None,
        help="File type: epub, pdf, other (default: from extension)",
    )
    p_process.set_defaults(func=_cmd_process)

    # --- show ---
    p_show = subparsers.add_parser(
        "show", help="Print a book record and its chapters as JSON",
    )
    p_show.add_argument("book_id", help="Book identifier")
    p_show.add_argument(
        "--with-content", action="store_true",
        help="Include chapter content in the output",
    )
    p_show.set_defaults(func=_cmd_show)

    return parser


async def _cmd_register(args: argparse.Namespace) -> int:
    """Create a book record awaiting processing."""
    from bookingest.config.settings import Settings
    from bookingest.core.models import BookRecord, FileType
    from bookingest.storage.sink_factory import create_sink

    sink = create_sink(Settings())
    if await sink.get_book(args.book_id) is not None:
        logger.error("Book already exists: %s", args.book_id)
        return 1

    record = BookRecord(
        id=args.book_id,
        file_type=FileType.parse(args.file_type or _detect_format(args.file_path)),
        file_path=args.file_path,
        uploader_id=args.uploader,
    )
    await sink.create_book(record)
    print(f"Registered {record.id} ({record.file_type.value}): {record.file_path}")
    return 0


async def _cmd_process(args: argparse.Namespace) -> int:
    """Run the ingestion pipeline for one book."""
    from bookingest.api.facade import run_book
    from bookingest.config.settings import Settings
    from bookingest.storage.sink_factory import create_sink

    settings = Settings()
    sink = create_sink(settings)
    if await sink.get_book(args.book_id) is None:
        logger.error("Book not found: %s", args.book_id)
        return 1

    file_type = args.file_type or _detect_format(args.file_url)
    logger.info("Processing %s (%s)", args.book_id, file_type)
    result = await run_book(
        args.book_id, args.file_url, file_type, settings=settings, sink=sink,
    )
    _print_result_summary(result)
    return 0 if result.success else 1


async def _cmd_show(args: argparse.Namespace) -> int:
    """Print a stored book with its chapter list."""
    from bookingest.config.settings import Settings
    from bookingest.storage.sink_factory import create_sink

    sink = create_sink(Settings())
    book = await sink.get_book(args.book_id)
    if book is None:
        logger.error("Book not found: %s", args.book_id)
        return 1

    chapters = await sink.list_chapters(args.book_id)
    exclude = None if args.with_content else {"content"}
    payload = {
        "book": book.model_dump(mode="json"),
        "chapters": [
            c.model_dump(mode="json", exclude=exclude) for c in chapters
        ],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def _detect_format(location: str) -> str:
    """Detect file type from the path or URL extension."""
    path = urlsplit(location).path if "://" in location else location
    return PurePosixPath(path).suffix.lower().lstrip(".") or "other"


def _print_result_summary(result: ProcessResult) -> None:
    """Print a human-readable summary of a ProcessResult."""
    print(f"\nProcessing {'complete' if result.success else 'failed'}:")
    print(f"  Book ID:      {result.book_id}")
    print(f"  Run ID:       {result.run_id}")
    print(f"  File type:    {result.file_type.value}")
    print(f"  Final stage:  {result.stage.value}")
    print(f"  Chapters:     {result.chapters_persisted}")
    if result.failed_chapters:
        print(f"  Failed:       {result.failed_chapters}")
    if result.error:
        print(f"  Error:        {result.error_type}: {result.error}")
    print(f"  Duration:     {result.duration_ms}ms")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from bookingest.config.settings import Settings
    from bookingest.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
