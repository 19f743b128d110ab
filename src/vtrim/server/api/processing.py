"""API handler for batch trimming.

Endpoints:
    POST /api/process - Trim every uploaded file of a session
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from vtrim.exceptions import NotFoundError
from vtrim.server.api.models import ProcessRequestModel
from vtrim.server.keys import CONFIG_KEY, ENGINE_KEY, PROBE_KEY, STORE_KEY
from vtrim.server.middleware import RouteSpec, parse_json_body
from vtrim.storage.sessions import UploadedFile
from vtrim.trim.models import TrimRequest
from vtrim.trim.orchestrator import BatchOrchestrator

logger = logging.getLogger(__name__)


async def process_handler(request: web.Request) -> web.Response:
    """Handle POST /api/process.

    The batch runs on a worker thread; files inside it are trimmed one
    at a time. Files that fail are left out of the response.

    Returns:
        JSON ``{"sessionId", "files": [{"originalName", "fileName", "url"}]}``.
    """
    body = await parse_json_body(request, ProcessRequestModel)
    config = request.app[CONFIG_KEY]
    store = request.app[STORE_KEY]

    session_id = body.session_id
    if not store.session_exists(session_id):
        raise NotFoundError("Session not found")

    uploads = [
        UploadedFile(
            original_name=f.original_name,
            upload_path=store.resolve_upload(session_id, f.upload_path),
            session_id=session_id,
        )
        for f in body.files
    ]
    trim_request = TrimRequest(
        session_id=session_id,
        files=uploads,
        output_dir=store.resolve_session_dir(session_id),
        trim_start=body.trim_start,
        trim_end=body.trim_end,
        base_name=body.output_base_name,
        default_base_name=config.trim.default_base_name,
    )

    orchestrator = BatchOrchestrator(request.app[PROBE_KEY], request.app[ENGINE_KEY])
    result = await asyncio.to_thread(orchestrator.run, trim_request)

    return web.json_response(
        {
            "sessionId": session_id,
            "files": [
                {
                    "originalName": p.original_name,
                    "fileName": p.file_name,
                    "url": p.url,
                }
                for p in result.processed
            ],
        }
    )


def get_processing_routes() -> list[RouteSpec]:
    """Return (method, path suffix, handler) tuples for processing routes."""
    return [("POST", "/process", process_handler)]
