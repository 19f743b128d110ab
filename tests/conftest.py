"""Shared test fixtures for vtrim."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from vtrim.config.loader import clear_config_cache
from vtrim.exceptions import EncodeError
from vtrim.storage.sessions import SessionStore, UploadedFile


class FakeTrimEngine:
    """TrimEngine that writes a marker file instead of running ffmpeg.

    ``fail_names`` lists input file names (exact match) for which
    execute raises EncodeError. Every call is recorded in ``calls``.
    """

    def __init__(self, fail_names: set[str] | None = None) -> None:
        self.fail_names = set(fail_names or ())
        self.calls: list[tuple[Path, Path, object]] = []

    def execute(self, input_path, output_path, window, progress_callback=None):
        self.calls.append((input_path, output_path, window))
        if input_path.name in self.fail_names:
            raise EncodeError(f"ffmpeg exited with code 1 on {input_path.name}", "boom")
        if progress_callback is not None:
            progress_callback(0.5)
        output_path.write_bytes(
            f"{input_path.name}:{window.start:.3f}-{window.end:.3f}".encode()
        )
        if progress_callback is not None:
            progress_callback(1.0)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def vtrim_data_dir(temp_dir: Path):
    """Point VTRIM_DATA_DIR at a temp directory for every test.

    Keeps tests away from ~/.vtrim and clears the config file cache.
    """
    data_dir = temp_dir / ".vtrim"
    data_dir.mkdir(parents=True, exist_ok=True)
    clear_config_cache()
    env = {
        "VTRIM_DATA_DIR": str(data_dir),
        "VTRIM_CONFIG_PATH": str(data_dir / "config.toml"),
    }
    with patch.dict(os.environ, env):
        yield data_dir
    clear_config_cache()


@pytest.fixture
def fake_engine() -> FakeTrimEngine:
    """A trim engine that never shells out."""
    return FakeTrimEngine()


@pytest.fixture
def store(temp_dir: Path) -> SessionStore:
    """Session store rooted in a temp directory with a 1 MB upload cap."""
    session_store = SessionStore(temp_dir / "storage", max_file_bytes=1024 * 1024)
    session_store.ensure_layout()
    return session_store


@pytest.fixture
def make_upload(store: SessionStore):
    """Factory that places a fake upload into a session's uploads dir."""

    def _make(session_id: str, original_name: str, content: bytes = b"video") -> UploadedFile:
        path = store.upload_dir(session_id) / f"stored-{original_name}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return UploadedFile(
            original_name=original_name, upload_path=path, session_id=session_id
        )

    return _make
