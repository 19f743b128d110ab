"""CLI serve command.

Runs the vtrim HTTP API until SIGTERM or SIGINT.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import sys
from pathlib import Path

import click

from vtrim.cli.exit_codes import ExitCode
from vtrim.config import get_config
from vtrim.config.models import VTrimConfig
from vtrim.tools.detection import detect_tool

logger = logging.getLogger(__name__)


def _configure_server_logging(
    log_level: str | None,
    log_format: str | None,
    config_path: Path | None,
) -> None:
    from vtrim.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        format=log_format,
        include_stderr=True,
    )


_BIND_ERRORS = {
    errno.EADDRINUSE: "port {port} is already in use",
    errno.EADDRNOTAVAIL: "address {bind} is not available on this host",
}


async def run_server(config: VTrimConfig, bind: str, port: int) -> int:
    """Serve the API on ``bind:port`` until SIGTERM or SIGINT.

    Returns:
        ExitCode.SUCCESS after a clean stop, GENERAL_ERROR if the
        listening socket could not be opened.
    """
    from aiohttp import web

    from vtrim.server.app import create_app
    from vtrim.server.signals import remove_signal_handlers, setup_signal_handlers

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    setup_signal_handlers(loop, stop)

    runner = web.AppRunner(
        create_app(config), shutdown_timeout=config.server.shutdown_timeout
    )
    await runner.setup()
    try:
        await web.TCPSite(runner, bind, port).start()
        logger.info(
            "Listening on http://%s:%d (pid %d); SIGTERM or Ctrl+C stops",
            bind,
            port,
            os.getpid(),
        )
        await stop.wait()
        logger.info(
            "Stopping; in-flight requests get %.1fs to finish",
            config.server.shutdown_timeout,
        )
    except OSError as e:
        reason = _BIND_ERRORS.get(e.errno, "{error}")
        logger.error(
            "Cannot start server: %s", reason.format(port=port, bind=bind, error=e)
        )
        return ExitCode.GENERAL_ERROR
    finally:
        remove_signal_handlers(loop)
        await runner.cleanup()
        logger.info("Server stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.vtrim/config.toml).",
)
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 3001).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format: text or json (default: text).",
)
def serve_command(
    config_path: Path | None,
    bind: str | None,
    port: int | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Run the vtrim HTTP API.

    Binds to localhost by default. There is no authentication, so only
    expose it on other interfaces behind something that adds it.

    Configuration precedence (highest to lowest):
      1. CLI flags (--bind, --port, --log-level, etc.)
      2. Environment variables (VTRIM_SERVER_*)
      3. Config file (--config or ~/.vtrim/config.toml)
      4. Default values

    \b
    Examples:
        vtrim serve                      # Start with defaults
        vtrim serve --port 9000          # Custom port
        vtrim serve --log-format json    # JSON logging for journald
    """
    try:
        _configure_server_logging(log_level, log_format, config_path)
        config = get_config(config_path=config_path)
    except ValueError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    server_bind = bind if bind is not None else config.server.bind
    server_port = port if port is not None else config.server.port

    if not 1 <= server_port <= 65535:
        logger.error("Port must be 1-65535, got %d", server_port)
        sys.exit(ExitCode.INVALID_ARGUMENTS)

    for tool, configured in (
        ("ffmpeg", config.tools.ffmpeg),
        ("ffprobe", config.tools.ffprobe),
    ):
        info = detect_tool(tool, configured)
        if not info.is_available():
            logger.warning(
                "%s unavailable (%s); every file will be skipped",
                tool,
                info.status_message,
            )

    logger.info(
        "Starting vtrim server (bind=%s, port=%d, policy=%s)",
        server_bind,
        server_port,
        config.trim.policy.value,
    )

    try:
        exit_code = asyncio.run(run_server(config, server_bind, server_port))
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        exit_code = ExitCode.INTERRUPTED
    sys.exit(exit_code)
