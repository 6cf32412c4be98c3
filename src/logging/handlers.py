# src/logging/handlers.py - v2
"""Size-based rotation for the optional log file (LOG_ROTATION / LOG_RETENTION)."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_PATTERN = re.compile(r"^(\d+)\s*([KMG])B$", re.IGNORECASE)
_UNIT_SHIFT = {"K": 10, "M": 20, "G": 30}


def _parse_size(size_str: str) -> int:
    """Bytes for a size like '10MB'; KB, MB and GB suffixes, any case."""
    match = _SIZE_PATTERN.match(size_str.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    amount, unit = match.groups()
    return int(amount) << _UNIT_SHIFT[unit.upper()]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Rotating handler writing UTF-8; missing parent directories are created."""
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
