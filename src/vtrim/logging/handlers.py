"""JSON log formatter."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Everything a plain LogRecord carries, plus what formatters and
# SessionContextFilter add. Anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
    "file_tag",
    "session_id",
    "file_index",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    ``session`` holds the batch a line belongs to (``id`` and, inside a
    batch, the 1-based ``file`` position). ``extra=`` values go under
    ``context``. Root-logger lines omit ``logger``.

    Example output:
        {"timestamp": "2026-01-05T10:00:00.123+00:00", "level": "INFO",
         "logger": "vtrim.trim.orchestrator", "message": "Trimmed a.mp4",
         "session": {"id": "1a2b...", "file": 1}}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name
        entry["message"] = record.getMessage()

        session_id = getattr(record, "session_id", None)
        if session_id:
            session: dict[str, Any] = {"id": session_id}
            file_index = getattr(record, "file_index", None)
            if file_index is not None:
                session["file"] = file_index
            entry["session"] = session

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extras:
            entry["context"] = extras

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)
