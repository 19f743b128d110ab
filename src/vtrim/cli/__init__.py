"""CLI module for vtrim."""

import logging
from pathlib import Path

import click

from vtrim import __version__

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options once per process."""
    global _logging_configured
    if _logging_configured:
        return

    from vtrim.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


@click.group()
@click.version_option(__version__, prog_name="vtrim")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """vtrim - Trim the start and end off batches of videos."""
    ctx.ensure_object(dict)
    # serve configures its own logging with daemon defaults
    if ctx.invoked_subcommand != "serve":
        _configure_logging(log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from vtrim.cli.doctor import doctor_command
    from vtrim.cli.serve import serve_command
    from vtrim.cli.sessions import sessions_group
    from vtrim.cli.trim import trim_command

    main.add_command(doctor_command)
    main.add_command(serve_command)
    main.add_command(sessions_group)
    main.add_command(trim_command)


_register_commands()
