"""vtrim trim command: trim local files without the server."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

import click

from vtrim.cli.exit_codes import ExitCode
from vtrim.config import get_config
from vtrim.exceptions import StorageError, ValidationError
from vtrim.executor.trim import FFmpegTrimExecutor
from vtrim.introspector.ffprobe import FFprobeProbe
from vtrim.storage.sessions import UploadedFile
from vtrim.trim.models import BatchResult, TrimRequest
from vtrim.trim.orchestrator import BatchOrchestrator

logger = logging.getLogger(__name__)


def _result_to_dict(result: BatchResult) -> dict:
    return {
        "processed": [
            {
                "originalName": p.original_name,
                "fileName": p.file_name,
                "path": str(p.output_path),
            }
            for p in result.processed
        ],
        "skipped": [
            {"index": s.index, "originalName": s.original_name, "reason": s.reason}
            for s in result.skipped
        ],
    }


@click.command("trim")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--start",
    "trim_start",
    type=click.FloatRange(min=0),
    default=0.0,
    show_default=True,
    help="Seconds to cut from the beginning of each file.",
)
@click.option(
    "--end",
    "trim_end",
    type=click.FloatRange(min=0),
    default=0.0,
    show_default=True,
    help="Seconds to cut from the end of each file.",
)
@click.option(
    "--name",
    "base_name",
    default=None,
    help="Output base name; files become NAME_1.ext, NAME_2.ext, ...",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("trimmed"),
    show_default=True,
    help="Directory for trimmed files.",
)
@click.option(
    "--policy",
    type=click.Choice(["copy", "reencode"], case_sensitive=False),
    default=None,
    help="Override the configured trim policy.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
def trim_command(
    files: tuple[Path, ...],
    trim_start: float,
    trim_end: float,
    base_name: str | None,
    output_dir: Path,
    policy: str | None,
    json_output: bool,
) -> None:
    """Trim the start and end off each FILE.

    Files are processed one at a time in the order given. Output numbers
    follow that order, so a file that fails leaves a gap in the numbering.

    \b
    Examples:
        vtrim trim a.mp4 b.mov --start 2 --end 1.5
        vtrim trim *.mkv --end 10 --name clip --policy reencode
    """
    try:
        config = get_config(trim_policy=policy.casefold() if policy else None)
    except ValueError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        raise SystemExit(ExitCode.CONFIG_ERROR) from None

    run_id = str(uuid.uuid4())
    try:
        request = TrimRequest(
            session_id=run_id,
            files=[
                UploadedFile(
                    original_name=path.name,
                    upload_path=path.resolve(),
                    session_id=run_id,
                )
                for path in files
            ],
            output_dir=output_dir,
            trim_start=trim_start,
            trim_end=trim_end,
            base_name=base_name,
            default_base_name=config.trim.default_base_name,
        )
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.INVALID_ARGUMENTS) from None

    orchestrator = BatchOrchestrator(
        FFprobeProbe.from_config(config),
        FFmpegTrimExecutor.from_config(config),
    )
    try:
        result = orchestrator.run(request)
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.STORAGE_ERROR) from None

    if json_output:
        click.echo(json.dumps(_result_to_dict(result), indent=2))
    else:
        for processed in result.processed:
            click.echo(f"✓ {processed.original_name} -> {processed.output_path}")
        for skipped in result.skipped:
            click.echo(
                f"✗ [{skipped.index}] {skipped.original_name}: {skipped.reason}",
                err=True,
            )
        click.echo(
            f"{len(result.processed)} of {result.total} file(s) trimmed "
            f"({config.trim.policy.value})."
        )

    if not result.processed:
        raise SystemExit(ExitCode.NOTHING_PROCESSED)
