# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Persistence sink ===
    sink_backend: Literal["memory", "sqlite"] = "sqlite"
    sqlite_db_path: Path = Path("~/.bookingest/books.db")
    files_root: Path = Path("~/.bookingest/files")

    # === Parsing ===
    epub_parser_backend: str = "ebooklib"

    # === Container loading ===
    http_probe_timeout_s: float = 10.0
    http_download_timeout_s: float = 60.0
    max_file_size_mb: int = 100

    # === Chapter extraction ===
    chapter_load_concurrency: int = 8

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate numeric limits; all violations are reported together."""
        errors: list[str] = []

        if self.max_file_size_mb <= 0:
            errors.append("MAX_FILE_SIZE_MB must be > 0")

        if self.chapter_load_concurrency < 1:
            errors.append("CHAPTER_LOAD_CONCURRENCY must be >= 1")

        if self.http_probe_timeout_s <= 0 or self.http_download_timeout_s <= 0:
            errors.append("HTTP timeouts must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
