"""Apply CLI logging flags on top of the configured LoggingConfig."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from vtrim.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of ``base`` with every non-None override applied.

    Rotation settings always come from ``base``; there are no CLI flags
    for them. The copy is validated again, so a bad ``level`` or
    ``format`` raises ValueError.
    """
    overrides = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    return replace(base, **{k: v for k, v in overrides.items() if v is not None})


def configure_logging_from_cli(
    *,
    config_path: Path | None = None,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> None:
    from vtrim.config import get_config
    from vtrim.logging import configure_logging

    base = get_config(config_path=config_path).logging
    configure_logging(
        build_logging_config(
            base,
            level=level,
            file=file,
            format=format,
            include_stderr=include_stderr,
        )
    )
