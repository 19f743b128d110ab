"""API handlers for session archives.

Endpoints:
    POST /api/create-zip - Zip a session's outputs
    GET /api/zips/{filename} - Download an archive (whole file only)
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from vtrim.server.api.models import ArchiveRequestModel
from vtrim.server.keys import ARCHIVER_KEY, STORE_KEY
from vtrim.server.middleware import RouteSpec, parse_json_body
from vtrim.server.ranges import serve_file

logger = logging.getLogger(__name__)


async def create_zip_handler(request: web.Request) -> web.Response:
    """Handle POST /api/create-zip.

    Must only be called after processing of the session has finished.

    Returns:
        JSON ``{"zipUrl", "fileName"}``.
    """
    body = await parse_json_body(request, ArchiveRequestModel)
    archiver = request.app[ARCHIVER_KEY]

    archive = await asyncio.to_thread(archiver.build, body.session_id)
    return web.json_response(
        {"zipUrl": f"/api/zips/{archive.name}", "fileName": archive.name}
    )


async def download_zip_handler(request: web.Request) -> web.StreamResponse:
    """Handle GET /api/zips/{filename}."""
    filename = request.match_info["filename"]
    path = request.app[STORE_KEY].resolve_archive(filename)
    return await serve_file(
        request,
        path,
        allow_ranges=False,
        attachment_name=filename,
        content_type="application/zip",
    )


def get_archive_routes() -> list[RouteSpec]:
    """Return (method, path suffix, handler) tuples for archive routes."""
    return [
        ("POST", "/create-zip", create_zip_handler),
        ("GET", "/zips/{filename}", download_zip_handler),
    ]
