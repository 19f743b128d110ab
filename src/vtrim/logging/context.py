"""Session context for structured logging.

Batch jobs run in worker threads; contextvars carry the session id and
current file index so every log line can be attributed to a batch.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_session_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)
_file_index: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "file_index", default=None
)


def set_session_context(session_id: str, file_index: int | None = None) -> None:
    """Set the current session context.

    Args:
        session_id: Session the current work belongs to.
        file_index: 1-based position of the file in its batch, or None.
    """
    _session_id.set(session_id)
    _file_index.set(file_index)


def clear_session_context() -> None:
    """Clear the current session context."""
    _session_id.set(None)
    _file_index.set(None)


def get_session_context() -> tuple[str | None, int | None]:
    """Return (session_id, file_index); either may be None."""
    return _session_id.get(), _file_index.get()


@contextmanager
def session_context(
    session_id: str, file_index: int | None = None
) -> Generator[None, None, None]:
    """Set session context on entry and restore the previous one on exit.

    Example:
        with session_context(session_id, 2):
            logger.info("Trimming")  # tagged [S1a2b3c4:F02]
    """
    old_session_id = _session_id.get()
    old_file_index = _file_index.get()
    try:
        set_session_context(session_id, file_index)
        yield
    finally:
        _session_id.set(old_session_id)
        _file_index.set(old_file_index)


class SessionContextFilter(logging.Filter):
    """Logging filter that injects session context into log records.

    Adds session_id and file_index for JSON output, plus a compact
    file_tag such as ``[S1a2b3c4:F02] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        session_id, file_index = get_session_context()

        record.session_id = session_id
        record.file_index = file_index

        if session_id:
            short = session_id[:8]
            if file_index is not None:
                record.file_tag = f"[S{short}:F{file_index:02d}] "
            else:
                record.file_tag = f"[S{short}] "
        else:
            record.file_tag = ""

        return True
