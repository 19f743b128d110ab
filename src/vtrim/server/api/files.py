"""API handler for trimmed output files.

Endpoints:
    GET /api/output/{session_id}/{filename} - Download or stream an output
"""

from __future__ import annotations

from aiohttp import web

from vtrim.server.keys import STORE_KEY
from vtrim.server.middleware import RouteSpec
from vtrim.server.ranges import serve_file


async def output_file_handler(request: web.Request) -> web.StreamResponse:
    """Handle GET /api/output/{session_id}/{filename}.

    With a ``Range`` header the exact slice is returned as 206 for
    in-browser scrubbing; without one the whole file is sent as an
    attachment.
    """
    session_id = request.match_info["session_id"]
    filename = request.match_info["filename"]
    path = request.app[STORE_KEY].resolve_output_file(session_id, filename)
    return await serve_file(request, path, attachment_name=filename)


def get_output_routes() -> list[RouteSpec]:
    """Return (method, path suffix, handler) tuples for output routes."""
    return [("GET", "/output/{session_id}/{filename}", output_file_handler)]
