"""Shared helpers for ffmpeg-based executors."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".vtrim_temp_"


def create_temp_output(output_path: Path, prefix: str = TEMP_PREFIX) -> Path:
    """Temp path beside ``output_path`` for the write-then-move pattern.

    The original suffix is kept so ffmpeg can infer the container.
    """
    return output_path.with_name(f"{prefix}{output_path.name}")


def validate_output(output_path: Path) -> tuple[bool, str | None]:
    """Check that ffmpeg produced a non-empty file.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not output_path.exists():
        return False, f"Output file does not exist: {output_path}"
    try:
        size = output_path.stat().st_size
    except OSError as e:
        return False, f"Could not stat output file: {e}"
    if size == 0:
        return False, f"Output file is empty: {output_path}"
    return True, None


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary file, logging any errors."""
    if path.exists():
        try:
            path.unlink()
            logger.debug("Cleaned up temp file: %s", path)
        except OSError as e:
            logger.warning("Could not clean up temp file %s: %s", path, e)


def stderr_tail(lines: list[str], max_lines: int = 20) -> str:
    """Last non-empty lines of ffmpeg stderr, for error diagnostics."""
    meaningful = [line.rstrip() for line in lines if line.strip()]
    return "\n".join(meaningful[-max_lines:])
