"""Typed keys for objects stored on the aiohttp Application."""

from __future__ import annotations

from aiohttp import web

from vtrim.config.models import VTrimConfig
from vtrim.executor.interface import TrimEngine
from vtrim.introspector.interface import MediaProbe
from vtrim.storage.archive import ArchiveBuilder
from vtrim.storage.sessions import SessionStore

CONFIG_KEY = web.AppKey("config", VTrimConfig)
STORE_KEY = web.AppKey("store", SessionStore)
ARCHIVER_KEY = web.AppKey("archiver", ArchiveBuilder)
PROBE_KEY = web.AppKey("probe", MediaProbe)
ENGINE_KEY = web.AppKey("engine", TrimEngine)
