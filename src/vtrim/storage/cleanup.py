"""Removal of partial outputs left by interrupted runs.

Temp files use the ``.vtrim_temp_`` prefix: partial ffmpeg outputs in
session output directories and half-written archives.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator
from pathlib import Path

from vtrim.executor.ffmpeg_utils import TEMP_PREFIX

logger = logging.getLogger(__name__)


def _temp_files(roots: Iterable[Path]) -> Iterator[Path]:
    for root in roots:
        if root.is_dir():
            yield from (p for p in root.rglob(f"{TEMP_PREFIX}*") if p.is_file())


def cleanup_orphaned_temp_files(
    search_dirs: list[Path],
    max_age_hours: float = 1.0,
) -> int:
    """Delete temp files below ``search_dirs`` not touched recently.

    Files modified within ``max_age_hours`` are left alone because a
    running job may still be writing them. Returns the removal count.
    """
    cutoff = time.time() - max_age_hours * 3600
    removed = 0
    for path in _temp_files(search_dirs):
        try:
            if path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", path, e)
            continue
        logger.info("Removed orphaned temp file: %s", path)
        removed += 1
    return removed
