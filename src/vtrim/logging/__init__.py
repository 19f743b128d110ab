"""Structured logging for vtrim.

Text or JSON output with file rotation, plus per-session context tags.
"""

from vtrim.logging.config import configure_logging
from vtrim.logging.context import (
    SessionContextFilter,
    clear_session_context,
    get_session_context,
    session_context,
    set_session_context,
)
from vtrim.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "SessionContextFilter",
    "clear_session_context",
    "configure_logging",
    "get_session_context",
    "session_context",
    "set_session_context",
]
