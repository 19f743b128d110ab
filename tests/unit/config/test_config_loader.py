"""Tests for the configuration loader."""

import os
from pathlib import Path

import pytest

from vtrim.config.env import EnvReader
from vtrim.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    get_storage_root,
    load_config_file,
)
from vtrim.config.models import StorageConfig, TrimPolicy, VTrimConfig
from vtrim.config.toml_parser import TomlParseError


class TestPaths:
    """Tests for data dir and default path resolution."""

    def test_data_dir_from_env(self, vtrim_data_dir: Path) -> None:
        assert get_data_dir() == vtrim_data_dir
        assert get_default_config_path() == vtrim_data_dir / "config.toml"

    def test_storage_root(self, vtrim_data_dir: Path, temp_dir: Path) -> None:
        assert get_storage_root(VTrimConfig()) == vtrim_data_dir / "storage"
        explicit = VTrimConfig(storage=StorageConfig(root=temp_dir / "s"))
        assert get_storage_root(explicit) == temp_dir / "s"


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file_is_empty(self, temp_dir: Path) -> None:
        assert load_config_file(temp_dir / "none.toml") == {}

    def test_reloads_on_change(self, temp_dir: Path) -> None:
        path = temp_dir / "config.toml"
        path.write_text('[server]\nport = 4000\n')
        assert load_config_file(path)["server"]["port"] == 4000

        path.write_text('[server]\nport = 5000\n')
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 10))
        assert load_config_file(path)["server"]["port"] == 5000

    def test_invalid_toml(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.toml"
        path.write_text("[server\nport = ")
        assert load_config_file(path) == {}
        clear_config_cache()
        with pytest.raises(TomlParseError):
            load_config_file(path, strict=True)


class TestGetConfig:
    """Tests for precedence in get_config."""

    def test_precedence(self, vtrim_data_dir: Path) -> None:
        config_path = vtrim_data_dir / "config.toml"
        config_path.write_text(
            '[trim]\npolicy = "reencode"\n\n[server]\nport = 4000\nbind = "0.0.0.0"\n'
        )
        reader = EnvReader(env={"VTRIM_SERVER_PORT": "5000"})

        config = get_config(env_reader=reader, trim_policy="copy")

        assert config.server.bind == "0.0.0.0"
        assert config.server.port == 5000
        assert config.trim.policy is TrimPolicy.COPY

    def test_invalid_merged_config(self, vtrim_data_dir: Path) -> None:
        (vtrim_data_dir / "config.toml").write_text('[trim]\npolicy = "turbo"\n')
        with pytest.raises(ValueError, match="policy"):
            get_config(env_reader=EnvReader(env={}))
