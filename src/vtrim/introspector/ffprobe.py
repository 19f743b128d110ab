"""FFprobe-based implementation of the MediaProbe protocol."""

from __future__ import annotations

import json
import logging
import math
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vtrim.config.models import VTrimConfig
from vtrim.core.subprocess_utils import run_command
from vtrim.exceptions import ProbeError
from vtrim.tools.detection import find_tool

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 60


class FFprobeProbe:
    """Reads container duration with ffprobe.

    The ffprobe location is resolved once at construction. A missing
    ffprobe is reported per call as ProbeError so a batch degrades to
    skipped files instead of failing outright.
    """

    def __init__(
        self,
        ffprobe_path: Path | None = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        """Initialize the probe.

        Args:
            ffprobe_path: Explicit ffprobe path. Falls back to PATH lookup.
            timeout: Seconds to wait for ffprobe before giving up.
        """
        self._ffprobe_path = find_tool("ffprobe", ffprobe_path)
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: VTrimConfig) -> FFprobeProbe:
        """Create a probe using the configured ffprobe path and timeout."""
        return cls(ffprobe_path=config.tools.ffprobe, timeout=config.trim.probe_timeout)

    @property
    def ffprobe_path(self) -> Path | None:
        return self._ffprobe_path

    def get_duration(self, path: Path) -> float:
        """Return the container duration of ``path`` in seconds.

        Raises:
            ProbeError: If ffprobe is unavailable, fails, times out, or
                reports no usable duration.
        """
        if self._ffprobe_path is None:
            raise ProbeError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg or set VTRIM_FFPROBE_PATH."
            )
        if not path.is_file():
            raise ProbeError(f"File not found: {path}")

        try:
            stdout, stderr, rc = run_command(
                [
                    self._ffprobe_path,
                    "-v",
                    "error",
                    "-show_entries",
                    "format=duration",
                    "-print_format",
                    "json",
                    path,
                ],
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe for {path}: {e}") from e

        if rc != 0:
            raise ProbeError(f"ffprobe failed for {path}: {stderr.strip() or rc}")

        return parse_duration(path, stdout)


def parse_duration(path: Path, ffprobe_stdout: str) -> float:
    """Extract ``format.duration`` from ffprobe JSON output.

    Raises:
        ProbeError: If the output is not JSON or has no finite,
            non-negative duration.
    """
    try:
        data = json.loads(ffprobe_stdout)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e

    raw = (data.get("format") or {}).get("duration") if isinstance(data, dict) else None
    if raw is None:
        raise ProbeError(
            f"No duration in ffprobe output for {path}. "
            "File may be corrupted or not a valid media file."
        )

    try:
        duration = float(raw)
    except (TypeError, ValueError) as e:
        raise ProbeError(f"Unparseable duration {raw!r} for {path}") from e

    if not math.isfinite(duration) or duration < 0:
        raise ProbeError(f"Invalid duration {raw!r} for {path}")

    logger.debug("Probed %s: %.3fs", path.name, duration)
    return duration
