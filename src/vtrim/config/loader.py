"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (VTRIM_*)
3. Config file (~/.vtrim/config.toml)
4. Default values

Environment variables:
- VTRIM_DATA_DIR: vtrim data directory (overrides ~/.vtrim/)
- VTRIM_CONFIG_PATH: config file (overrides <data_dir>/config.toml)
- VTRIM_STORAGE_DIR: scratch storage root for sessions
- VTRIM_FFMPEG_PATH / VTRIM_FFPROBE_PATH: tool paths
- VTRIM_TRIM_POLICY: "copy" or "reencode"
- VTRIM_FILE_TIMEOUT / VTRIM_PROBE_TIMEOUT: per-invocation limits (seconds)
- VTRIM_UPLOAD_MAX_FILES / VTRIM_UPLOAD_MAX_FILE_MB / VTRIM_UPLOAD_EXTENSIONS
- VTRIM_SERVER_BIND / VTRIM_SERVER_PORT / VTRIM_SERVER_SHUTDOWN_TIMEOUT
- VTRIM_LOG_LEVEL / VTRIM_LOG_FILE / VTRIM_LOG_FORMAT
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import NamedTuple

from vtrim.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vtrim.config.env import EnvReader
from vtrim.config.models import VTrimConfig
from vtrim.config.toml_parser import load_toml_file

DEFAULT_DATA_DIR = Path.home() / ".vtrim"


class _CachedFile(NamedTuple):
    mtime: float
    data: dict


_file_cache: dict[Path, _CachedFile] = {}
_file_cache_lock = threading.Lock()


def _path_from_env(var: str) -> Path | None:
    value = os.environ.get(var)
    return Path(value).expanduser() if value else None


def get_data_dir() -> Path:
    """Directory holding config.toml, logs and the default storage root."""
    return _path_from_env("VTRIM_DATA_DIR") or DEFAULT_DATA_DIR


def get_default_config_path() -> Path:
    return _path_from_env("VTRIM_CONFIG_PATH") or get_data_dir() / "config.toml"


def get_storage_root(config: VTrimConfig) -> Path:
    """Session storage root: the configured one, else <data_dir>/storage."""
    return config.storage.root or get_data_dir() / "storage"


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Parse a TOML config file, reusing the last result while unchanged.

    A file whose mtime differs from the cached entry is parsed again. A
    missing file yields ``{}``.

    Raises:
        TomlParseError: Only when ``strict`` and the file is malformed.
    """
    path = path or get_default_config_path()
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        mtime = 0.0

    with _file_cache_lock:
        entry = _file_cache.get(path)
        if entry is None or entry.mtime != mtime:
            entry = _CachedFile(mtime, load_toml_file(path, strict=strict))
            _file_cache[path] = entry
        return entry.data


def clear_config_cache() -> None:
    with _file_cache_lock:
        _file_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    storage_root: Path | None = None,
    trim_policy: str | None = None,
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VTrimConfig:
    """Merge file, environment and CLI settings into a VTrimConfig.

    Args:
        config_path: Config file (overrides VTRIM_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        storage_root: CLI override for the storage root.
        trim_policy: CLI override for the trim policy.
        env_reader: Reader to use instead of one over os.environ.
        strict: Raise TomlParseError on a malformed config file.

    Raises:
        ValueError: If the merged configuration is invalid.
    """
    cli = ConfigSource(
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
        storage_root=storage_root,
        trim_policy=trim_policy,
    )
    layers = (
        source_from_file(load_config_file(config_path, strict=strict)),
        source_from_env(env_reader or EnvReader()),
        cli,
    )
    builder = ConfigBuilder()
    for layer in layers:
        builder.apply(layer)
    return builder.build()
