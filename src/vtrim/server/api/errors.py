"""Standardized API error responses.

Every error body has the shape ``{"error": message, "code": CODE}`` with
an optional ``details`` entry.

Usage:
    from vtrim.server.api.errors import api_error, INVALID_REQUEST

    return api_error("No files uploaded", code=INVALID_REQUEST)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from vtrim.exceptions import (
    ArchiveError,
    InvalidSessionIdError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
    VTrimError,
)

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
INVALID_JSON = "INVALID_JSON"
VALIDATION_FAILED = "VALIDATION_FAILED"
INVALID_ID_FORMAT = "INVALID_ID_FORMAT"
NOT_FOUND = "NOT_FOUND"
PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
STORAGE_ERROR = "STORAGE_ERROR"
ARCHIVE_ERROR = "ARCHIVE_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (use constants from this module).
        status: HTTP status code (default 400).
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def error_for_exception(exc: VTrimError) -> web.Response:
    """Map a domain exception to its API error response.

    Order matters: ArchiveSourceMissingError is both an ArchiveError and
    a NotFoundError and must surface as 404.
    """
    if isinstance(exc, InvalidSessionIdError):
        return api_error(str(exc), code=INVALID_ID_FORMAT, status=400)
    if isinstance(exc, PayloadTooLargeError):
        return api_error(str(exc), code=PAYLOAD_TOO_LARGE, status=413)
    if isinstance(exc, ValidationError):
        return api_error(str(exc), code=VALIDATION_FAILED, status=400)
    if isinstance(exc, NotFoundError):
        return api_error(str(exc), code=NOT_FOUND, status=404)
    if isinstance(exc, StorageError):
        return api_error(str(exc), code=STORAGE_ERROR, status=500)
    if isinstance(exc, ArchiveError):
        return api_error(str(exc), code=ARCHIVE_ERROR, status=500)
    return api_error(str(exc), code=INTERNAL_ERROR, status=500)
