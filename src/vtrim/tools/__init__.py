"""External tool discovery and output parsing."""

from vtrim.tools.detection import (
    ToolInfo,
    ToolNotAvailableError,
    ToolStatus,
    detect_tool,
    find_tool,
    require_tool,
)
from vtrim.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

__all__ = [
    "FFmpegProgress",
    "ToolInfo",
    "ToolNotAvailableError",
    "ToolStatus",
    "detect_tool",
    "find_tool",
    "parse_stderr_progress",
    "require_tool",
]
