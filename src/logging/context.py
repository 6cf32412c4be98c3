# src/logging/context.py - v2
"""Contextual logging support: attach book_id, run_id and stage to log records.

Context variables are task-local, so concurrent pipeline runs keep
separate logging context.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per pipeline run.
_book_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "book_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    book_id: str | None = None
    run_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        book_id=_book_id.get(),
        run_id=_run_id.get(),
        stage=_stage.get(),
    )


def set_book_context(book_id: str, run_id: str) -> None:
    """Set run-level context (called once per pipeline run)."""
    _book_id.set(book_id)
    _run_id.set(run_id)


def set_stage_context(stage: str | None) -> None:
    """Set the current pipeline stage."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _book_id.set(None)
    _run_id.set(None)
    _stage.set(None)
