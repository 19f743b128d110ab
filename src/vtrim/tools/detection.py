"""External tool detection.

Locates ffmpeg and ffprobe (configured path first, then PATH) and reads
their version banner.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for tool detection
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from vtrim.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)

DETECTION_TIMEOUT = 10

_VERSION_PATTERN = re.compile(r"version\s+(\S+)")

INSTALL_HINT = (
    "Install FFmpeg (https://ffmpeg.org/download.html) or set "
    "VTRIM_FFMPEG_PATH / VTRIM_FFPROBE_PATH."
)


class ToolStatus(Enum):
    """Status of an external tool."""

    AVAILABLE = "available"
    MISSING = "missing"
    ERROR = "error"  # found but the version check failed


@dataclass
class ToolInfo:
    """Detection result for one tool."""

    name: str
    path: Path | None = None
    version: str | None = None
    status: ToolStatus = ToolStatus.MISSING
    status_message: str | None = None
    detected_at: datetime | None = None

    def is_available(self) -> bool:
        return self.status == ToolStatus.AVAILABLE


class ToolNotAvailableError(RuntimeError):
    """Raised when a required external tool cannot be used."""

    def __init__(self, info: ToolInfo) -> None:
        reason = info.status_message or f"{info.name} not found"
        super().__init__(f"{reason}. {INSTALL_HINT}")
        self.info = info


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to the executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)
    return None


def detect_tool(name: str, configured_path: Path | None = None) -> ToolInfo:
    """Locate a tool and run ``<tool> -version``.

    Never raises; problems are reported through ToolInfo.status.
    """
    info = ToolInfo(name=name, detected_at=datetime.now(timezone.utc))

    path = find_tool(name, configured_path)
    if path is None:
        info.status_message = f"{name} not found in PATH"
        return info
    info.path = path

    try:
        stdout, stderr, rc = run_command(
            [path, "-version"], timeout=DETECTION_TIMEOUT
        )
    except subprocess.TimeoutExpired:
        stdout, stderr, rc = "", "timeout", -1
    except OSError as e:
        stdout, stderr, rc = "", str(e), -1

    if rc != 0:
        info.status = ToolStatus.ERROR
        info.status_message = f"Failed to get {name} version: {stderr.strip()}"
        return info

    match = _VERSION_PATTERN.search(stdout)
    if match:
        info.version = match.group(1)
    info.status = ToolStatus.AVAILABLE
    return info


def require_tool(name: str, configured_path: Path | None = None) -> Path:
    """Return the path of a usable tool.

    Raises:
        ToolNotAvailableError: If the tool is missing or broken.
    """
    info = detect_tool(name, configured_path)
    if not info.is_available() or info.path is None:
        raise ToolNotAvailableError(info)
    return info.path
