"""Trim executors."""

from vtrim.executor.ffmpeg_base import FFmpegExecutorBase
from vtrim.executor.interface import ProgressCallback, TrimEngine
from vtrim.executor.trim import FFmpegTrimExecutor

__all__ = [
    "FFmpegExecutorBase",
    "FFmpegTrimExecutor",
    "ProgressCallback",
    "TrimEngine",
]
