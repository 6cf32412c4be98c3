# src/parser/parser_factory.py - v1
"""Factory: instantiate an EPUB parser adapter by backend name."""

from __future__ import annotations

from bookingest.parser.base_parser import BaseEpubParser
from bookingest.parser.ebooklib_parser import EbookLibParser

# Registry maps backend name → parser class.
_PARSER_REGISTRY: dict[str, type[BaseEpubParser]] = {}


def _register_defaults() -> None:
    """Register built-in parsers."""
    for cls in [EbookLibParser]:
        _PARSER_REGISTRY[cls().name] = cls


_register_defaults()


class UnsupportedParserError(ValueError):
    """Raised when no parser is registered under a name."""


def create_parser(name: str = "ebooklib") -> BaseEpubParser:
    """Create the parser adapter registered as ``name``.

    Raises:
        UnsupportedParserError: If no parser is registered.
    """
    cls = _PARSER_REGISTRY.get(name.lower())
    if cls is None:
        raise UnsupportedParserError(
            f"No EPUB parser {name!r}. "
            f"Available: {', '.join(sorted(_PARSER_REGISTRY))}"
        )
    return cls()


def register_parser(name: str, cls: type[BaseEpubParser]) -> None:
    """Register a custom parser adapter."""
    _PARSER_REGISTRY[name.lower()] = cls


def available_parsers() -> list[str]:
    """Return registered backend names."""
    return sorted(_PARSER_REGISTRY)
