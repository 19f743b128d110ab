"""TOML config file loading."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TomlParseError(ValueError):
    """Raised when a config file exists but is not valid TOML."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Failed to parse {path}: {message}")
        self.path = path


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into a dictionary.

    Raises:
        tomllib.TOMLDecodeError: If the content is not valid TOML.
    """
    return tomllib.loads(content)


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load a TOML file.

    Args:
        path: File to read.
        strict: If True, raise TomlParseError on unreadable or invalid
            files. If False, log a warning and return an empty dict.

    Returns:
        Parsed configuration. Empty dict if the file does not exist.
    """
    if not path.exists():
        return {}

    try:
        return parse_toml(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise TomlParseError(path, str(e)) from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
