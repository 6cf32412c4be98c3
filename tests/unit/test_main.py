# tests/unit/test_main.py - v2
"""Tests for main.py - CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bookingest import __version__
from bookingest.core.models import FileType
from bookingest.main import _build_parser, _detect_format, _print_result_summary, main
from bookingest.pipeline.book_pipeline import ProcessingStage, ProcessResult


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at a throwaway SQLite database and files root."""
    files_root = tmp_path / "files"
    files_root.mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SINK_BACKEND", "sqlite")
    monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "books.db"))
    monkeypatch.setenv("FILES_ROOT", str(files_root))
    monkeypatch.setenv("LOG_FORMAT", "text")
    return files_root


class TestBuildParser:
    def test_register_args(self):
        args = _build_parser().parse_args(
            ["register", "b1", "up/x.epub", "--type", "epub", "--uploader", "u1"],
        )
        assert args.command == "register"
        assert args.file_type == "epub"
        assert args.uploader == "u1"

    def test_show_args(self):
        args = _build_parser().parse_args(["show", "b1", "--with-content"])
        assert args.with_content is True

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestDetectFormat:
    @pytest.mark.parametrize("location,expected", [
        ("uploads/book.EPUB", "epub"),
        ("https://x/files/doc.pdf?sig=abc", "pdf"),
        ("uploads/noext", "other"),
        ("book.mobi", "mobi"),
    ])
    def test_detect(self, location, expected):
        assert _detect_format(location) == expected


class TestResultSummary:
    def test_failed_run(self, capsys):
        result = ProcessResult(
            book_id="b1", file_type=FileType.EPUB, run_id="r1",
            stage=ProcessingStage.ERROR, success=False, error="boom",
            error_type="ParseFailedError", failed_chapters=[2], duration_ms=7,
        )
        _print_result_summary(result)
        out = capsys.readouterr().out
        assert "Processing failed:" in out
        assert "File type:    epub" in out
        assert "Final stage:  error" in out
        assert "Failed:       [2]" in out
        assert "ParseFailedError: boom" in out


class TestCommands:
    def test_no_command(self, cli_env):
        assert main([]) == 1

    def test_register_process_show(self, cli_env, capsys, epub_factory):
        (cli_env / "uploads").mkdir()
        (cli_env / "uploads" / "book.epub").write_bytes(epub_factory(
            chapters=[("One", "<p>1</p>"), ("Two", "<p>2</p>")],
        ))

        assert main(["register", "b1", "uploads/book.epub", "--uploader", "u1"]) == 0
        assert main(["process", "b1", "uploads/book.epub"]) == 0
        capsys.readouterr()

        assert main(["show", "b1"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["book"]["title"] == "My Fake Book"
        assert payload["book"]["processed"] is True
        assert payload["book"]["file_type"] == "epub"
        assert [c["title"] for c in payload["chapters"]] == ["One", "Two"]
        assert "content" not in payload["chapters"][0]

    def test_show_with_content(self, cli_env, capsys):
        (cli_env / "doc.pdf").write_bytes(b"%PDF")
        main(["register", "b2", "doc.pdf"])
        main(["process", "b2", "doc.pdf"])
        capsys.readouterr()

        assert main(["show", "b2", "--with-content"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert "View PDF" in payload["chapters"][0]["content"]

    def test_register_duplicate(self, cli_env):
        assert main(["register", "b1", "x.epub"]) == 0
        assert main(["register", "b1", "x.epub"]) == 1

    def test_process_unknown_book(self, cli_env):
        assert main(["process", "nope", "x.epub"]) == 1

    def test_process_failure_exit_code(self, cli_env):
        main(["register", "b3", "missing.epub"])
        assert main(["process", "b3", "missing.epub"]) == 1

    def test_show_unknown_book(self, cli_env):
        assert main(["show", "nope"]) == 1
