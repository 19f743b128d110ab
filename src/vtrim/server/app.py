"""aiohttp application factory for the vtrim server."""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from vtrim import __version__
from vtrim.config.loader import get_storage_root
from vtrim.config.models import VTrimConfig
from vtrim.executor.interface import TrimEngine
from vtrim.executor.trim import FFmpegTrimExecutor
from vtrim.introspector.ffprobe import FFprobeProbe
from vtrim.introspector.interface import MediaProbe
from vtrim.server.api import API_PREFIXES, setup_api_routes
from vtrim.server.keys import (
    ARCHIVER_KEY,
    CONFIG_KEY,
    ENGINE_KEY,
    PROBE_KEY,
    STORE_KEY,
)
from vtrim.server.middleware import error_middleware
from vtrim.storage.archive import ArchiveBuilder
from vtrim.storage.cleanup import cleanup_orphaned_temp_files
from vtrim.storage.sessions import SessionStore

logger = logging.getLogger(__name__)

# Leave room for multipart framing on top of the raw file bytes.
_MULTIPART_OVERHEAD = 1024 * 1024


def create_app(
    config: VTrimConfig,
    *,
    store: SessionStore | None = None,
    probe: MediaProbe | None = None,
    engine: TrimEngine | None = None,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        config: Effective configuration.
        store: Session store; built from ``config.storage`` when None.
        probe: Duration probe; ffprobe-backed when None.
        engine: Trim engine; ffmpeg-backed when None.

    Returns:
        Configured aiohttp Application instance.
    """
    if store is None:
        store = SessionStore(
            get_storage_root(config), max_file_bytes=config.upload.max_file_bytes
        )

    app = web.Application(
        middlewares=[error_middleware],
        client_max_size=config.upload.max_files * config.upload.max_file_bytes
        + _MULTIPART_OVERHEAD,
    )
    app[CONFIG_KEY] = config
    app[STORE_KEY] = store
    app[ARCHIVER_KEY] = ArchiveBuilder(store)
    app[PROBE_KEY] = probe or FFprobeProbe.from_config(config)
    app[ENGINE_KEY] = engine or FFmpegTrimExecutor.from_config(config)

    app.router.add_get("/health", health_handler)
    for prefix in API_PREFIXES:
        app.router.add_get(f"{prefix}/health", health_handler)
    setup_api_routes(app)

    app.on_startup.append(_prepare_storage)

    return app


async def _prepare_storage(app: web.Application) -> None:
    """Create the storage layout and evict stale scratch data."""
    config = app[CONFIG_KEY]
    store = app[STORE_KEY]

    await asyncio.to_thread(store.ensure_layout)
    pruned = await asyncio.to_thread(
        store.prune_expired, config.storage.session_max_age_hours
    )
    cleaned = await asyncio.to_thread(
        cleanup_orphaned_temp_files, [store.output_root, store.archives_root]
    )
    logger.info(
        "Storage ready at %s (pruned %d session(s), %d temp file(s))",
        store.root,
        pruned,
        cleaned,
    )


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health.

    Returns:
        JSON ``{"status": "ok", "version", "policy"}``.
    """
    config = request.app[CONFIG_KEY]
    return web.json_response(
        {
            "status": "ok",
            "version": __version__,
            "policy": config.trim.policy.value,
        }
    )
