"""Core utilities shared across vtrim."""

from vtrim.core.subprocess_utils import run_command

__all__ = ["run_command"]
