"""vtrim doctor command for checking external tool health."""

import json

import click

from vtrim.cli.exit_codes import ExitCode
from vtrim.config import get_config
from vtrim.tools.detection import INSTALL_HINT, ToolInfo, detect_tool


def _format_status(available: bool) -> str:
    return "✓" if available else "✗"


def _tool_to_dict(info: ToolInfo) -> dict:
    return {
        "name": info.name,
        "status": info.status.value,
        "path": str(info.path) if info.path else None,
        "version": info.version,
        "message": info.status_message,
    }


@click.command("doctor")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
def doctor_command(json_output: bool) -> None:
    """Check that ffmpeg and ffprobe are installed and runnable.

    Exit codes:
      0 - Both tools available
      30 - At least one tool missing or broken
    """
    config = get_config()
    tools = [
        detect_tool("ffmpeg", config.tools.ffmpeg),
        detect_tool("ffprobe", config.tools.ffprobe),
    ]
    all_ok = all(t.is_available() for t in tools)

    if json_output:
        click.echo(
            json.dumps(
                {
                    "ok": all_ok,
                    "policy": config.trim.policy.value,
                    "tools": [_tool_to_dict(t) for t in tools],
                },
                indent=2,
            )
        )
    else:
        for info in tools:
            detail = info.version or info.status_message or ""
            location = f" ({info.path})" if info.path else ""
            click.echo(
                f"{_format_status(info.is_available())} {info.name:<8} "
                f"{detail}{location}"
            )
        click.echo(f"Trim policy: {config.trim.policy.value}")
        if not all_ok:
            click.echo("")
            click.echo(INSTALL_HINT, err=True)

    raise SystemExit(ExitCode.SUCCESS if all_ok else ExitCode.TOOL_NOT_AVAILABLE)
