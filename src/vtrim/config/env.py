"""Typed access to VTRIM_* environment variables.

EnvReader accepts an optional mapping in place of os.environ so that
configuration code can be tested without touching the process environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EnvReader:
    """Read environment variables with type conversion.

    Malformed values are logged and fall back to the default; a typo in
    the environment never stops the server from starting.

    Example:
        reader = EnvReader(env={"VTRIM_SERVER_PORT": "9000"})
        reader.get_int("VTRIM_SERVER_PORT", 3001)  # 9000
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _convert(
        self, var: str, kind: str, parse: Callable[[str], T], default: T | None
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return parse(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid %s", var, raw, kind)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._convert(var, "integer", int, default)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._convert(var, "number", float, default)

    def get_path(
        self, var: str, must_exist: bool = False, default: Path | None = None
    ) -> Path | None:
        """Return the value as a user-expanded Path.

        With ``must_exist``, a path missing on disk is logged and the
        default is returned instead.
        """
        path = self._convert(var, "path", lambda raw: Path(raw).expanduser(), None)
        if path is None:
            return default
        if must_exist and not path.exists():
            logger.warning("Ignoring %s: %s does not exist", var, path)
            return default
        return path

    def get_list(
        self, var: str, separator: str = ",", default: list[str] | None = None
    ) -> list[str] | None:
        """Split the value on ``separator``, dropping blank items."""
        items = self._convert(
            var, "list", lambda raw: [s.strip() for s in raw.split(separator)], None
        )
        if items is None:
            return default
        return [item for item in items if item]
