"""Session storage on the local filesystem.

A session is nothing more than directories named by its id::

    <root>/uploads/<session_id>/<uuid>-<original name>
    <root>/output/<session_id>/<base>_<n><ext>
    <root>/archives/trimmed_videos_<session_id>.zip

Session ids are UUID4 strings. There is no authorization layer, so an
id is the only thing standing between a client and a session's files;
ids are validated before any path is built from them.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import time
import uuid
from collections.abc import AsyncIterable
from dataclasses import dataclass
from pathlib import Path, PurePath

from vtrim.exceptions import (
    InvalidSessionIdError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "trimmed_videos_"
ARCHIVE_SUFFIX = ".zip"
# Uploads are buffered to this size before each write to disk
UPLOAD_FLUSH_BYTES = 1024 * 1024

_ARCHIVE_NAME_RE = re.compile(
    re.escape(ARCHIVE_PREFIX)
    + r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
    + re.escape(ARCHIVE_SUFFIX)
    + "$"
)
_UNSAFE_UPLOAD_CHARS = re.compile(r"[^A-Za-z0-9._ -]")
_MAX_STORED_NAME = 200


@dataclass(frozen=True)
class UploadedFile:
    """An upload as stored on disk.

    Attributes:
        original_name: Client-supplied file name. Untrusted; used only for
            display and to pick the output extension.
        upload_path: Server-assigned location of the bytes.
        session_id: Owning session.
    """

    original_name: str
    upload_path: Path
    session_id: str


def validate_session_id(session_id: str) -> str:
    """Return ``session_id`` if it is a canonical UUID string.

    Raises:
        InvalidSessionIdError: If the id is malformed.
    """
    try:
        parsed = uuid.UUID(session_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidSessionIdError(f"Invalid session id: {session_id!r}") from None
    if str(parsed) != session_id:
        raise InvalidSessionIdError(f"Invalid session id: {session_id!r}")
    return session_id


def _is_plain_name(name: str) -> bool:
    return (
        bool(name)
        and name not in (".", "..")
        and "/" not in name
        and "\\" not in name
        and "\x00" not in name
        and not name.startswith(".")
    )


def stored_upload_name(original_name: str) -> str:
    """Collision-resistant on-disk name for an upload."""
    base = PurePath(original_name.replace("\\", "/")).name
    base = _UNSAFE_UPLOAD_CHARS.sub("_", base).lstrip(".") or "upload"
    return f"{uuid.uuid4()}-{base[-_MAX_STORED_NAME:]}"


class SessionStore:
    """Filesystem-backed lifecycle of upload sessions."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, root: Path, max_file_bytes: int | None = None) -> None:
        """Initialize the store.

        Args:
            root: Storage root; created lazily.
            max_file_bytes: Per-upload size cap. None disables the cap.
        """
        self.root = root
        self.max_file_bytes = max_file_bytes
        self.uploads_root = root / "uploads"
        self.output_root = root / "output"
        self.archives_root = root / "archives"

    def ensure_layout(self) -> None:
        """Create the top-level storage directories.

        Raises:
            StorageError: If a directory cannot be created.
        """
        for directory in (self.uploads_root, self.output_root, self.archives_root):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot create {directory}: {e}") from e

    # Session lifecycle

    def create_session(self) -> str:
        """Allocate a session with empty uploads and output directories.

        Raises:
            StorageError: If the directories cannot be created.
        """
        session_id = str(uuid.uuid4())
        try:
            self.upload_dir(session_id).mkdir(parents=True)
            self.resolve_session_dir(session_id).mkdir(parents=True)
        except OSError as e:
            raise StorageError(f"Cannot create session storage: {e}") from e
        logger.info("Created session %s", session_id)
        return session_id

    def resolve_session_dir(self, session_id: str) -> Path:
        """Output directory of a session. It may not exist."""
        return self.output_root / validate_session_id(session_id)

    def upload_dir(self, session_id: str) -> Path:
        """Uploads directory of a session. It may not exist."""
        return self.uploads_root / validate_session_id(session_id)

    def session_exists(self, session_id: str) -> bool:
        return (
            self.resolve_session_dir(session_id).is_dir()
            or self.upload_dir(session_id).is_dir()
        )

    def delete_session(self, session_id: str) -> None:
        """Remove everything a session owns.

        Deleting an unknown session is not an error.

        Raises:
            StorageError: If removal fails for a reason other than absence.
        """
        targets = [self.resolve_session_dir(session_id), self.upload_dir(session_id)]
        for directory in targets:
            try:
                shutil.rmtree(directory)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Cannot remove {directory}: {e}") from e

        archive = self.archive_path(session_id)
        try:
            archive.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot remove {archive}: {e}") from e
        logger.info("Deleted session %s", session_id)

    def prune_expired(self, max_age_hours: float) -> int:
        """Delete sessions whose directories were last modified before the cutoff.

        Args:
            max_age_hours: Age threshold. 0 or less disables pruning.

        Returns:
            Number of sessions removed.
        """
        if max_age_hours <= 0:
            return 0

        cutoff = time.time() - max_age_hours * 3600
        candidates: dict[str, float] = {}
        for parent in (self.uploads_root, self.output_root):
            if not parent.is_dir():
                continue
            for entry in parent.iterdir():
                try:
                    validate_session_id(entry.name)
                    mtime = entry.stat().st_mtime
                except (ValidationError, OSError):
                    continue
                candidates[entry.name] = max(mtime, candidates.get(entry.name, 0.0))

        removed = 0
        for session_id, mtime in candidates.items():
            if mtime >= cutoff:
                continue
            try:
                self.delete_session(session_id)
            except StorageError as e:
                logger.warning("Could not prune session %s: %s", session_id, e)
                continue
            removed += 1

        if removed:
            logger.info("Pruned %d expired session(s)", removed)
        return removed

    # Uploads

    async def store_upload(
        self,
        session_id: str,
        original_name: str,
        chunks: AsyncIterable[bytes],
    ) -> UploadedFile:
        """Stream an upload into the session's uploads directory.

        Chunks are collected up to ``UPLOAD_FLUSH_BYTES`` and written from
        a worker thread, so disk I/O never runs on the event loop.

        Raises:
            PayloadTooLargeError: If the upload exceeds ``max_file_bytes``.
                The partial file is removed.
            StorageError: If the file cannot be written.
        """
        target = self.upload_dir(session_id) / stored_upload_name(original_name)
        written = 0
        try:
            fh = await asyncio.to_thread(target.open, "wb")
            try:
                pending = bytearray()
                async for chunk in chunks:
                    written += len(chunk)
                    if self.max_file_bytes is not None and written > self.max_file_bytes:
                        raise PayloadTooLargeError(
                            f"{original_name} exceeds the "
                            f"{self.max_file_bytes // (1024 * 1024)} MB limit"
                        )
                    pending += chunk
                    if len(pending) >= UPLOAD_FLUSH_BYTES:
                        await asyncio.to_thread(fh.write, bytes(pending))
                        pending.clear()
                if pending:
                    await asyncio.to_thread(fh.write, bytes(pending))
            finally:
                await asyncio.to_thread(fh.close)
        except PayloadTooLargeError:
            target.unlink(missing_ok=True)
            raise
        except OSError as e:
            target.unlink(missing_ok=True)
            raise StorageError(f"Cannot store upload {original_name}: {e}") from e

        logger.debug("Stored upload %s (%d bytes) as %s", original_name, written, target.name)
        return UploadedFile(
            original_name=original_name, upload_path=target, session_id=session_id
        )

    def resolve_upload(self, session_id: str, upload_path: str | Path) -> Path:
        """Map a client-echoed upload path to a file inside the session.

        Accepts either the stored file name or a full path; either way
        the result must sit directly in the session's uploads directory.
        The file itself may be gone.

        Raises:
            ValidationError: If the path points anywhere else.
        """
        upload_dir = self.upload_dir(session_id)
        candidate = Path(upload_path)
        if not candidate.is_absolute():
            if not _is_plain_name(str(upload_path)):
                raise ValidationError(f"Invalid upload path: {upload_path!r}")
            return upload_dir / candidate

        try:
            resolved = candidate.resolve()
            inside = resolved.parent == upload_dir.resolve()
        except OSError:
            inside = False
        if not inside:
            raise ValidationError(
                f"Upload path does not belong to session {session_id}"
            )
        return resolved

    # Outputs and archives

    def resolve_output_file(self, session_id: str, filename: str) -> Path:
        """Path of an existing output file.

        Raises:
            NotFoundError: If the name is unsafe or the file is absent.
        """
        if not _is_plain_name(filename):
            raise NotFoundError(f"File not found: {filename}")
        path = self.resolve_session_dir(session_id) / filename
        if not path.is_file():
            raise NotFoundError(f"File not found: {filename}")
        return path

    @staticmethod
    def archive_name(session_id: str) -> str:
        return f"{ARCHIVE_PREFIX}{validate_session_id(session_id)}{ARCHIVE_SUFFIX}"

    def archive_path(self, session_id: str) -> Path:
        """Where the session's archive lives. It may not exist."""
        return self.archives_root / self.archive_name(session_id)

    def resolve_archive(self, filename: str) -> Path:
        """Path of an existing archive by its file name.

        Raises:
            NotFoundError: If the name is not an archive name or the file
                is absent.
        """
        if not _ARCHIVE_NAME_RE.match(filename):
            raise NotFoundError(f"Archive not found: {filename}")
        path = self.archives_root / filename
        if not path.is_file():
            raise NotFoundError(f"Archive not found: {filename}")
        return path
