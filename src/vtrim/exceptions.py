"""Exception hierarchy for vtrim.

Errors fall into two groups:

Request-level errors propagate to the HTTP/CLI boundary and become a
failure response:
    - ValidationError: malformed or missing request fields (client fault)
    - StorageError: filesystem allocation/removal failure (server fault)
    - NotFoundError: referenced session, file or archive is absent
    - ArchiveError: archive stream failure

Per-file errors are raised while trimming a single file. The batch
orchestrator catches them, logs them and omits the file from the result:
    - ProbeError
    - InfeasibleTrimError
    - EncodeError
"""

from __future__ import annotations


class VTrimError(Exception):
    """Base class for all vtrim errors."""

    pass


class ValidationError(VTrimError):
    """Raised when a request is missing fields or carries invalid values."""

    pass


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size or count limits."""

    pass


class InvalidSessionIdError(ValidationError):
    """Raised when a session id is not a canonical UUID string."""

    pass


class StorageError(VTrimError):
    """Raised when session storage cannot be created or removed."""

    pass


class NotFoundError(VTrimError):
    """Raised when a session, output file or archive does not exist."""

    pass


class ArchiveError(VTrimError):
    """Raised when building a session archive fails."""

    pass


class ArchiveSourceMissingError(ArchiveError, NotFoundError):
    """Raised when a session has no output directory or no output files.

    Surfaces as not-found to callers while remaining an ArchiveError for
    code that handles archive failures as a group.
    """

    pass


class FileProcessingError(VTrimError):
    """Base class for errors that abort a single file but not the batch."""

    pass


class ProbeError(FileProcessingError):
    """Raised when a media file cannot be probed for its duration."""

    pass


class InfeasibleTrimError(FileProcessingError):
    """Raised when the requested cuts leave nothing of the video."""

    pass


class EncodeError(FileProcessingError):
    """Raised when ffmpeg fails to produce the trimmed output.

    Attributes:
        diagnostics: Tail of ffmpeg's stderr output, if any.
    """

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics = diagnostics
