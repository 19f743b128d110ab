"""API handler for video uploads.

Endpoints:
    POST /api/upload - Multipart upload (field ``videos``), opens a session
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from pathlib import PurePath

from aiohttp import BodyPartReader, web

from vtrim.exceptions import PayloadTooLargeError, ValidationError
from vtrim.server.api.errors import INVALID_REQUEST, api_error
from vtrim.server.keys import CONFIG_KEY, STORE_KEY
from vtrim.server.middleware import RouteSpec

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "videos"

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "video/mp4",
        "video/quicktime",
        "video/x-msvideo",
        "video/avi",
        "video/msvideo",
        "video/x-matroska",
        "video/webm",
        "application/octet-stream",
    }
)


def check_upload_allowed(
    filename: str, content_type: str | None, allowed_extensions: list[str]
) -> None:
    """Reject files outside the extension and content-type allow-lists.

    Raises:
        ValidationError: If the file is not an accepted video type.
    """
    extension = PurePath(filename).suffix.lstrip(".").casefold()
    if extension not in allowed_extensions:
        raise ValidationError(
            f"Invalid file type: {filename}. Only video files are allowed."
        )
    mime = (content_type or "application/octet-stream").split(";")[0].strip().casefold()
    if mime not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            f"Invalid content type {mime!r} for {filename}. "
            "Only video files are allowed."
        )


async def _iter_part(part: BodyPartReader) -> AsyncIterator[bytes]:
    while True:
        chunk = await part.read_chunk()
        if not chunk:
            break
        yield chunk


async def upload_handler(request: web.Request) -> web.Response:
    """Handle POST /api/upload.

    Files are streamed to disk part by part. Any rejection removes the
    session that was opened for the request.

    Returns:
        JSON ``{"sessionId", "files": [{"originalName", "uploadPath"}]}``.
    """
    config = request.app[CONFIG_KEY]
    store = request.app[STORE_KEY]

    if not request.content_type.startswith("multipart/"):
        return api_error("No files uploaded", code=INVALID_REQUEST)

    reader = await request.multipart()
    session_id: str | None = None
    stored = []

    try:
        while True:
            part = await reader.next()
            if part is None:
                break
            if not isinstance(part, BodyPartReader):
                continue
            if part.name != UPLOAD_FIELD or not part.filename:
                await part.release()
                continue

            if len(stored) >= config.upload.max_files:
                raise PayloadTooLargeError(
                    f"Too many files: at most {config.upload.max_files} per upload"
                )
            check_upload_allowed(
                part.filename,
                part.headers.get("Content-Type"),
                config.upload.allowed_extensions,
            )

            if session_id is None:
                session_id = store.create_session()
            stored.append(
                await store.store_upload(session_id, part.filename, _iter_part(part))
            )
    except Exception:
        if session_id is not None:
            store.delete_session(session_id)
        raise

    if session_id is None:
        return api_error("No files uploaded", code=INVALID_REQUEST)

    logger.info("Session %s: accepted %d upload(s)", session_id, len(stored))
    return web.json_response(
        {
            "sessionId": session_id,
            "files": [
                {"originalName": f.original_name, "uploadPath": f.upload_path.name}
                for f in stored
            ],
        }
    )


def get_upload_routes() -> list[RouteSpec]:
    """Return (method, path suffix, handler) tuples for upload routes."""
    return [("POST", "/upload", upload_handler)]
