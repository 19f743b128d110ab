"""Trim window planning.

Converts a probed duration plus start/end cut amounts into the absolute
window that ffmpeg keeps, and derives deterministic output names.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from vtrim.exceptions import InfeasibleTrimError

DEFAULT_BASE_NAME = "trimmed"
DEFAULT_EXTENSION = ".mp4"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._ -]")


@dataclass(frozen=True)
class TrimWindow:
    """Portion of the source that survives the trim, in seconds.

    ``end`` is absolute (``duration - trim_end``), never a length.
    """

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


def coerce_seconds(value: Any) -> float:
    """Interpret a user-supplied cut amount.

    Absent, non-numeric and non-finite values become 0.0. Strings are
    parsed leniently, so ``"1.5s"`` reads as 1.5 the way a browser form
    submits it. Negative numbers are returned unchanged for the caller
    to reject.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = re.match(r"\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?", value)
        if match is None:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def plan_trim(duration: float, trim_start: float, trim_end: float) -> TrimWindow:
    """Compute the window ``[trim_start, duration - trim_end)``.

    Args:
        duration: Total media duration in seconds.
        trim_start: Seconds to cut from the beginning.
        trim_end: Seconds to cut from the end.

    Returns:
        The window to keep.

    Raises:
        InfeasibleTrimError: If nothing would remain after both cuts.
    """
    end = duration - trim_end
    if end <= trim_start:
        raise InfeasibleTrimError(
            f"video too short to trim ({duration:.3f}s with cuts "
            f"{trim_start:g}s/{trim_end:g}s)"
        )
    return TrimWindow(start=trim_start, end=end)


def sanitize_base_name(name: str | None, default: str = DEFAULT_BASE_NAME) -> str:
    """Make a user-supplied base name safe for use as a file name stem.

    Characters outside ``[A-Za-z0-9._ -]`` become underscores; leading
    dots are dropped so the output never becomes a hidden file. Blank
    input yields ``default``.
    """
    if not name:
        return default
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name.strip()).lstrip(".").strip()
    return cleaned or default


def output_extension(original_name: str) -> str:
    """Extension of the original upload, or ``.mp4`` when it has none."""
    suffix = PurePath(original_name).suffix
    if not suffix or _UNSAFE_NAME_CHARS.search(suffix):
        return DEFAULT_EXTENSION
    return suffix


def output_filename(base_name: str, index: int, original_name: str) -> str:
    """Name of the output for the file at 0-based batch ``index``.

    Numbering follows input position, not success count.
    """
    return f"{base_name}_{index + 1}{output_extension(original_name)}"
