"""Data types for trim batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from vtrim.exceptions import ValidationError
from vtrim.storage.sessions import UploadedFile
from vtrim.trim.planner import DEFAULT_BASE_NAME, sanitize_base_name


class BatchState(Enum):
    """Where a batch run currently is.

    PROBING, PLANNING and EXECUTING repeat once per file.
    """

    PENDING = "pending"
    PROBING = "probing"
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"


@dataclass
class TrimRequest:
    """One processing request.

    The order of ``files`` fixes output numbering. ``base_name`` is
    sanitized on construction; blank means ``trimmed``.

    Raises:
        ValidationError: If a cut amount is negative.
    """

    session_id: str
    files: list[UploadedFile]
    output_dir: Path
    trim_start: float = 0.0
    trim_end: float = 0.0
    base_name: str | None = None
    default_base_name: str = DEFAULT_BASE_NAME

    def __post_init__(self) -> None:
        if self.trim_start < 0:
            raise ValidationError("trimStart must be >= 0")
        if self.trim_end < 0:
            raise ValidationError("trimEnd must be >= 0")
        self.base_name = sanitize_base_name(self.base_name, self.default_base_name)


@dataclass(frozen=True)
class ProcessedFile:
    """A successfully trimmed file."""

    original_name: str
    file_name: str
    output_path: Path
    session_id: str

    @property
    def url(self) -> str:
        return f"/api/output/{self.session_id}/{self.file_name}"


@dataclass(frozen=True)
class SkippedFile:
    """A file left out of the batch result.

    Attributes:
        index: 1-based position in the request.
        original_name: Client-supplied name.
        reason: Human-readable cause.
    """

    index: int
    original_name: str
    reason: str


@dataclass
class BatchResult:
    """Outcome of a batch. ``processed`` keeps request order."""

    session_id: str
    processed: list[ProcessedFile] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.processed) + len(self.skipped)
