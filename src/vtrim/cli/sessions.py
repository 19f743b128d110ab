"""CLI commands for session storage maintenance."""

from __future__ import annotations

import click

from vtrim.cli.exit_codes import ExitCode
from vtrim.config import get_config, get_storage_root
from vtrim.exceptions import StorageError, ValidationError
from vtrim.storage.cleanup import cleanup_orphaned_temp_files
from vtrim.storage.sessions import SessionStore


def _get_store() -> tuple[SessionStore, float]:
    config = get_config()
    store = SessionStore(
        get_storage_root(config), max_file_bytes=config.upload.max_file_bytes
    )
    return store, config.storage.session_max_age_hours


@click.group("sessions")
def sessions_group() -> None:
    """Inspect and clean up session scratch storage."""


@sessions_group.command("prune")
@click.option(
    "--max-age-hours",
    type=float,
    default=None,
    help="Remove sessions older than this (default: storage.session_max_age_hours).",
)
def prune_command(max_age_hours: float | None) -> None:
    """Remove expired sessions and orphaned temp files."""
    store, configured_age = _get_store()
    age = max_age_hours if max_age_hours is not None else configured_age

    removed = store.prune_expired(age)
    cleaned = cleanup_orphaned_temp_files([store.output_root, store.archives_root])
    click.echo(f"Removed {removed} session(s) and {cleaned} temp file(s).")


@sessions_group.command("rm")
@click.argument("session_id")
def remove_command(session_id: str) -> None:
    """Delete one session's uploads, outputs and archive."""
    store, _ = _get_store()
    try:
        store.delete_session(session_id)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.INVALID_ARGUMENTS) from None
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.STORAGE_ERROR) from None
    click.echo(f"Removed session {session_id}.")
