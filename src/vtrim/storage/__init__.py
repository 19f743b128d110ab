"""Session storage, archives and scratch maintenance."""

from vtrim.storage.archive import ArchiveBuilder
from vtrim.storage.cleanup import cleanup_orphaned_temp_files
from vtrim.storage.sessions import (
    SessionStore,
    UploadedFile,
    stored_upload_name,
    validate_session_id,
)

__all__ = [
    "ArchiveBuilder",
    "SessionStore",
    "UploadedFile",
    "cleanup_orphaned_temp_files",
    "stored_upload_name",
    "validate_session_id",
]
