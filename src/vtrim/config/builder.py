"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building VTrimConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from vtrim.config.env import EnvReader
from vtrim.config.models import (
    DEFAULT_ALLOWED_EXTENSIONS,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
    TrimConfig,
    TrimPolicy,
    UploadConfig,
    VTrimConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values mean "not specified in this source" and never override
    values from lower-precedence sources.
    """

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Storage
    storage_root: Path | None = None
    storage_session_max_age_hours: float | None = None

    # Upload limits
    upload_max_files: int | None = None
    upload_max_file_mb: int | None = None
    upload_allowed_extensions: list[str] | None = None

    # Trim
    trim_policy: str | None = None
    trim_file_timeout: int | None = None
    trim_probe_timeout: int | None = None
    trim_video_crf: int | None = None
    trim_video_preset: str | None = None
    trim_audio_bitrate: str | None = None
    trim_default_base_name: str | None = None

    # Server
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds VTrimConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply a configuration source, overriding existing values."""
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> VTrimConfig:
        """Build the final VTrimConfig with defaults for unset values.

        Raises:
            ValueError: If any resolved value fails validation.
        """
        tools = ToolPathsConfig(
            ffmpeg=self._get("ffmpeg_path", None),
            ffprobe=self._get("ffprobe_path", None),
        )

        storage = StorageConfig(
            root=self._get("storage_root", None),
            session_max_age_hours=self._get("storage_session_max_age_hours", 24.0),
        )

        upload = UploadConfig(
            max_files=self._get("upload_max_files", 20),
            max_file_mb=self._get("upload_max_file_mb", 500),
            allowed_extensions=list(
                self._get("upload_allowed_extensions", DEFAULT_ALLOWED_EXTENSIONS)
            ),
        )

        trim = TrimConfig(
            policy=self._get("trim_policy", TrimPolicy.COPY),
            file_timeout=self._get("trim_file_timeout", 1800),
            probe_timeout=self._get("trim_probe_timeout", 60),
            video_crf=self._get("trim_video_crf", 23),
            video_preset=self._get("trim_video_preset", "medium"),
            audio_bitrate=self._get("trim_audio_bitrate", "192k"),
            default_base_name=self._get("trim_default_base_name", "trimmed"),
        )

        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 3001),
            shutdown_timeout=self._get("server_shutdown_timeout", 30.0),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", True),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return VTrimConfig(
            tools=tools,
            storage=storage,
            upload=upload,
            trim=trim,
            server=server,
            logging=logging_config,
        )


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file."""
    tools = file_config.get("tools", {})
    storage = file_config.get("storage", {})
    upload = file_config.get("upload", {})
    trim = file_config.get("trim", {})
    server = file_config.get("server", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        ffmpeg_path=_optional_path(tools.get("ffmpeg")),
        ffprobe_path=_optional_path(tools.get("ffprobe")),
        storage_root=_optional_path(storage.get("root")),
        storage_session_max_age_hours=storage.get("session_max_age_hours"),
        upload_max_files=upload.get("max_files"),
        upload_max_file_mb=upload.get("max_file_mb"),
        upload_allowed_extensions=upload.get("allowed_extensions"),
        trim_policy=trim.get("policy"),
        trim_file_timeout=trim.get("file_timeout"),
        trim_probe_timeout=trim.get("probe_timeout"),
        trim_video_crf=trim.get("video_crf"),
        trim_video_preset=trim.get("video_preset"),
        trim_audio_bitrate=trim.get("audio_bitrate"),
        trim_default_base_name=trim.get("default_base_name"),
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        logging_level=logging_conf.get("level"),
        logging_file=_optional_path(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from VTRIM_* environment variables."""
    return ConfigSource(
        ffmpeg_path=reader.get_path("VTRIM_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("VTRIM_FFPROBE_PATH"),
        storage_root=reader.get_path("VTRIM_STORAGE_DIR"),
        storage_session_max_age_hours=reader.get_float("VTRIM_SESSION_MAX_AGE_HOURS"),
        upload_max_files=reader.get_int("VTRIM_UPLOAD_MAX_FILES"),
        upload_max_file_mb=reader.get_int("VTRIM_UPLOAD_MAX_FILE_MB"),
        upload_allowed_extensions=reader.get_list("VTRIM_UPLOAD_EXTENSIONS"),
        trim_policy=reader.get_str("VTRIM_TRIM_POLICY"),
        trim_file_timeout=reader.get_int("VTRIM_FILE_TIMEOUT"),
        trim_probe_timeout=reader.get_int("VTRIM_PROBE_TIMEOUT"),
        server_bind=reader.get_str("VTRIM_SERVER_BIND"),
        server_port=reader.get_int("VTRIM_SERVER_PORT"),
        server_shutdown_timeout=reader.get_float("VTRIM_SERVER_SHUTDOWN_TIMEOUT"),
        logging_level=reader.get_str("VTRIM_LOG_LEVEL"),
        logging_file=reader.get_path("VTRIM_LOG_FILE"),
        logging_format=reader.get_str("VTRIM_LOG_FORMAT"),
    )
