# src/logging/context.py — v1
"""Contextual logging support: attach document, run, artifact and phase to log records.

Values live in context variables so concurrently analyzed artifacts each log
under their own ``artifact_id``.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_artifact_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "artifact_id", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document_id: str | None = None
    run_id: str | None = None
    artifact_id: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        run_id=_run_id.get(),
        artifact_id=_artifact_id.get(),
        phase=_phase.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (once per orchestrator run)."""
    _run_id.set(run_id)


def set_document_context(document_id: str | None) -> None:
    """Set document-level context (once per processed document)."""
    _document_id.set(document_id)


def set_phase_context(phase: str | None) -> None:
    _phase.set(phase)


@contextmanager
def artifact_context(artifact_id: str) -> Iterator[None]:
    """Scope log records to one artifact; restores the previous value on exit."""
    token = _artifact_id.set(artifact_id)
    try:
        yield
    finally:
        _artifact_id.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _run_id.set(None)
    _artifact_id.set(None)
    _phase.set(None)
