"""Parsing of ffmpeg stderr progress lines."""

import re
from dataclasses import dataclass

_TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+)\.(\d+)")
_FRAME_PATTERN = re.compile(r"frame=\s*(\d+)")
_SPEED_PATTERN = re.compile(r"speed=\s*([^\s]+)")


@dataclass
class FFmpegProgress:
    """One parsed ffmpeg status line."""

    frame: int | None = None
    out_time_us: int | None = None  # output timestamp in microseconds
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_fraction(self, duration_seconds: float | None) -> float:
        """Return progress in [0.0, 1.0] for an output of the given length.

        Returns 0.0 when the duration or output time is unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return max(0.0, min(1.0, out_time / duration_seconds))


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an ffmpeg stderr status line.

    ffmpeg writes status lines such as
    ``frame= 1234 fps= 30 ... time=00:01:23.45 bitrate=... speed=2.0x``.
    Stream-copy runs of audio-only inputs omit ``frame=``, so any line
    carrying ``time=`` is accepted.

    Returns:
        Parsed FFmpegProgress, or None if the line is not a status line.
    """
    time_match = _TIME_PATTERN.search(line)
    if time_match is None:
        return None

    hours, minutes, seconds = (int(time_match.group(i)) for i in (1, 2, 3))
    # fractional part is centiseconds in practice; scale by digit count
    fraction = time_match.group(4)
    fraction_us = int(fraction) * 10 ** (6 - len(fraction)) if len(fraction) <= 6 else 0

    result = FFmpegProgress(
        out_time_us=(hours * 3600 + minutes * 60 + seconds) * 1_000_000 + fraction_us
    )

    frame_match = _FRAME_PATTERN.search(line)
    if frame_match:
        result.frame = int(frame_match.group(1))

    speed_match = _SPEED_PATTERN.search(line)
    if speed_match and speed_match.group(1) != "N/A":
        result.speed = speed_match.group(1)

    return result
