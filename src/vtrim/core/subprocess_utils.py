"""Subprocess wrapper for short-lived external tool invocations.

Used for ffprobe calls and tool version checks. Long-running ffmpeg jobs
go through FFmpegExecutorBase instead so stderr can be streamed.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def run_command(
    args: list[str | Path],
    timeout: float = 120,
    **kwargs: Any,
) -> tuple[str, str, int]:
    """Run an external command and capture its output as text.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds.
        **kwargs: Additional subprocess.run arguments.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If the command times out. The child is
            killed by subprocess.run before this propagates.
        FileNotFoundError: If the executable does not exist.
    """
    str_args = [str(arg) for arg in args]
    command_name = Path(str_args[0]).name if str_args else "unknown"

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name},
    )
    start_time = time.monotonic()

    try:
        result = subprocess.run(  # nosec B603 - caller builds args from fixed flags
            str_args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ss: %s",
            timeout,
            command_name,
            extra={"command": command_name, "timeout_seconds": timeout},
        )
        raise

    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(time.monotonic() - start_time, 3),
            "returncode": result.returncode,
        },
    )
    return result.stdout or "", result.stderr or "", result.returncode
