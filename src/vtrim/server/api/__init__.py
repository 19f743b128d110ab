"""JSON API routes for the vtrim server.

Modules:

- uploads.py: multipart upload, opens a session
- processing.py: batch trimming
- archives.py: zip creation and download
- files.py: output file download with byte ranges
- sessions.py: session cleanup

API Versioning:
    All endpoints are available under both ``/api/`` and ``/api/v1/``.
    Both prefixes resolve to the same handler.

Resource IDs:
    Sessions are UUIDv4 strings (e.g. ``/api/cleanup/{session_id}``).
"""

from aiohttp import web

from vtrim.server.api.archives import get_archive_routes
from vtrim.server.api.files import get_output_routes
from vtrim.server.api.processing import get_processing_routes
from vtrim.server.api.sessions import get_session_routes
from vtrim.server.api.uploads import get_upload_routes

__all__ = [
    "API_PREFIXES",
    "setup_api_routes",
]

API_PREFIXES = ("/api", "/api/v1")

_ROUTE_GETTERS = [
    get_upload_routes,
    get_processing_routes,
    get_archive_routes,
    get_output_routes,
    get_session_routes,
]


def setup_api_routes(app: web.Application) -> None:
    """Register every API route under each prefix in API_PREFIXES."""
    for prefix in API_PREFIXES:
        for get_routes in _ROUTE_GETTERS:
            for method, suffix, handler in get_routes():
                path = f"{prefix}{suffix}"
                if method == "GET":
                    # add_get also answers HEAD
                    app.router.add_get(path, handler)
                else:
                    app.router.add_route(method, path, handler)
