"""API handler for session cleanup.

Endpoints:
    DELETE /api/cleanup/{session_id} - Remove all of a session's files
"""

from __future__ import annotations

import asyncio

from aiohttp import web

from vtrim.server.keys import STORE_KEY
from vtrim.server.middleware import RouteSpec


async def cleanup_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/cleanup/{session_id}.

    Idempotent: cleaning up an unknown or already-removed session
    succeeds.
    """
    session_id = request.match_info["session_id"]
    await asyncio.to_thread(request.app[STORE_KEY].delete_session, session_id)
    return web.json_response({"message": "Cleaned up"})


def get_session_routes() -> list[RouteSpec]:
    """Return (method, path suffix, handler) tuples for session routes."""
    return [("DELETE", "/cleanup/{session_id}", cleanup_handler)]
