# tests/unit/config/test_settings.py - v2
"""Tests for config/settings.py - typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest

from bookingest.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_sink(self):
        s = Settings(_env_file=None)
        assert s.sink_backend == "sqlite"
        assert s.sqlite_db_path == Path("~/.bookingest/books.db")

    def test_default_loading_limits(self):
        s = Settings(_env_file=None)
        assert s.http_probe_timeout_s == 10.0
        assert s.http_download_timeout_s == 60.0
        assert s.max_file_size_mb == 100
        assert s.max_file_size_bytes == 100 * 1024 * 1024

    def test_default_parser_and_concurrency(self):
        s = Settings(_env_file=None)
        assert s.epub_parser_backend == "ebooklib"
        assert s.chapter_load_concurrency == 8

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "json"
        assert s.log_file is None


class TestSettingsValidation:
    def test_zero_file_size(self):
        with pytest.raises(ConfigurationError, match="MAX_FILE_SIZE_MB"):
            Settings(_env_file=None, max_file_size_mb=0)

    def test_zero_concurrency(self):
        with pytest.raises(ConfigurationError, match="CHAPTER_LOAD_CONCURRENCY"):
            Settings(_env_file=None, chapter_load_concurrency=0)

    def test_negative_timeout(self):
        with pytest.raises(ConfigurationError, match="timeouts"):
            Settings(_env_file=None, http_probe_timeout_s=-1)

    def test_errors_reported_together(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, max_file_size_mb=0, chapter_load_concurrency=0)
        assert "MAX_FILE_SIZE_MB" in str(exc_info.value)
        assert "CHAPTER_LOAD_CONCURRENCY" in str(exc_info.value)


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SINK_BACKEND", "memory")
        monkeypatch.setenv("MAX_FILE_SIZE_MB", "5")
        s = Settings(_env_file=None)
        assert s.sink_backend == "memory"
        assert s.max_file_size_bytes == 5 * 1024 * 1024

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("CHAPTER_LOAD_CONCURRENCY=3\nLOG_FORMAT=text\n")
        s = Settings(_env_file=env_file)
        assert s.chapter_load_concurrency == 3
        assert s.log_format == "text"


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, sink_backend="memory")
        assert s.sink_backend == "memory"

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None, max_file_size_mb=-5)
