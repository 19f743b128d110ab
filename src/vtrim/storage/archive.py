"""Zip archives of a session's trimmed outputs."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

from vtrim.exceptions import ArchiveError, ArchiveSourceMissingError
from vtrim.executor.ffmpeg_utils import TEMP_PREFIX
from vtrim.storage.sessions import SessionStore

logger = logging.getLogger(__name__)

COMPRESS_LEVEL = 9


class ArchiveBuilder:
    """Bundles a session's output directory into a single zip.

    Entries are stored flat (file name only) at maximum deflate level.
    ``zipfile`` streams each member from disk, so aggregate output size is
    not bounded by memory. The archive is written under a temp name and
    renamed only after the zip has been closed.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def build(self, session_id: str) -> Path:
        """Create (or overwrite) the session's archive.

        Returns:
            Path of the finished archive.

        Raises:
            ArchiveSourceMissingError: If the session has no output
                directory or no output files.
            ArchiveError: If writing the archive fails.
        """
        source_dir = self.store.resolve_session_dir(session_id)
        if not source_dir.is_dir():
            raise ArchiveSourceMissingError("Session not found")

        members = sorted(
            p
            for p in source_dir.iterdir()
            if p.is_file() and not p.name.startswith(TEMP_PREFIX)
        )
        if not members:
            raise ArchiveSourceMissingError("Session has no output files")

        target = self.store.archive_path(session_id)
        temp_target = target.with_name(f"{TEMP_PREFIX}{target.name}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(
                temp_target,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=COMPRESS_LEVEL,
            ) as zf:
                for member in members:
                    zf.write(member, arcname=member.name)
            os.replace(temp_target, target)
        except (OSError, zipfile.BadZipFile) as e:
            temp_target.unlink(missing_ok=True)
            raise ArchiveError(f"Could not build archive: {e}") from e

        logger.info(
            "Archived %d file(s) for session %s -> %s",
            len(members),
            session_id,
            target.name,
        )
        return target
