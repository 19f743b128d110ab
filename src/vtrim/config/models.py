"""Configuration data models.

This module defines dataclasses for vtrim configuration options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TrimPolicy(str, Enum):
    """How ffmpeg produces a trimmed file.

    The policy is a deployment decision, fixed by configuration, and is
    never chosen per request.
    """

    COPY = "copy"
    """Seek before opening the input and copy streams verbatim.

    Fast and lossless, but the cut snaps to the nearest keyframe.
    """

    REENCODE = "reencode"
    """Seek after opening the input and re-encode audio and video.

    Frame-accurate, at the cost of encode time and generation loss.
    """


DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = ("mp4", "mov", "avi", "mkv", "webm")


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class StorageConfig:
    """Configuration for session scratch storage."""

    root: Path | None = None
    """Root directory for uploads, outputs and archives.

    None means ``<data_dir>/storage``.
    """

    session_max_age_hours: float = 24.0
    """Sessions older than this are removed by prune. 0 disables pruning."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.session_max_age_hours < 0:
            raise ValueError(
                "session_max_age_hours must be >= 0, "
                f"got {self.session_max_age_hours}"
            )


@dataclass
class UploadConfig:
    """Limits applied to upload requests."""

    max_files: int = 20
    """Maximum number of files accepted in one upload request."""

    max_file_mb: int = 500
    """Maximum size of a single uploaded file, in megabytes."""

    allowed_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS)
    )
    """Lowercase extensions (without dot) accepted for upload."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_files < 1:
            raise ValueError(f"max_files must be >= 1, got {self.max_files}")
        if self.max_file_mb < 1:
            raise ValueError(f"max_file_mb must be >= 1, got {self.max_file_mb}")
        self.allowed_extensions = [
            ext.casefold().lstrip(".") for ext in self.allowed_extensions
        ]

    @property
    def max_file_bytes(self) -> int:
        """Maximum size of a single uploaded file, in bytes."""
        return self.max_file_mb * 1024 * 1024


@dataclass
class TrimConfig:
    """Configuration for probing and trimming."""

    policy: TrimPolicy = TrimPolicy.COPY
    file_timeout: int = 1800
    """Seconds allowed for one ffmpeg invocation. 0 disables the limit."""

    probe_timeout: int = 60
    """Seconds allowed for one ffprobe invocation."""

    video_crf: int = 23
    video_preset: str = "medium"
    audio_bitrate: str = "192k"
    default_base_name: str = "trimmed"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not isinstance(self.policy, TrimPolicy):
            try:
                self.policy = TrimPolicy(str(self.policy).casefold())
            except ValueError:
                valid = ", ".join(p.value for p in TrimPolicy)
                raise ValueError(
                    f"policy must be one of {valid}, got {self.policy!r}"
                ) from None
        if self.file_timeout < 0:
            raise ValueError(f"file_timeout must be >= 0, got {self.file_timeout}")
        if self.probe_timeout < 1:
            raise ValueError(f"probe_timeout must be >= 1, got {self.probe_timeout}")
        if not 0 <= self.video_crf <= 51:
            raise ValueError(f"video_crf must be 0-51, got {self.video_crf}")
        if not self.default_base_name.strip():
            raise ValueError("default_base_name must not be blank")


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    bind: str = "127.0.0.1"
    port: int = 3001
    shutdown_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.shutdown_timeout < 0:
            raise ValueError(
                f"shutdown_timeout must be >= 0, got {self.shutdown_timeout}"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "info"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = True
    max_bytes: int = 10_485_760
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.casefold() not in valid_levels:
            raise ValueError(
                f"level must be one of {sorted(valid_levels)}, got {self.level}"
            )
        valid_formats = {"text", "json"}
        if self.format.casefold() not in valid_formats:
            raise ValueError(
                f"format must be one of {sorted(valid_formats)}, got {self.format}"
            )
        if self.max_bytes < 1:
            raise ValueError(f"max_bytes must be >= 1, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must be >= 0, got {self.backup_count}")


@dataclass
class VTrimConfig:
    """Top-level vtrim configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    trim: TrimConfig = field(default_factory=TrimConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
