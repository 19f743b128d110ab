"""Tests for ffmpeg stderr progress parsing."""

import pytest

from vtrim.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress


class TestParseStderrProgress:
    """Tests for parse_stderr_progress."""

    def test_full_status_line(self) -> None:
        progress = parse_stderr_progress(
            "frame= 1234 fps= 30 q=28.0 size=   10240kB time=00:01:23.45 "
            "bitrate=1000.0kbits/s speed=2.05x"
        )
        assert progress is not None
        assert progress.frame == 1234
        assert progress.out_time_seconds == pytest.approx(83.45)
        assert progress.speed == "2.05x"

    def test_audio_only_line(self) -> None:
        """Lines without frame= still carry a timestamp."""
        progress = parse_stderr_progress(
            "size=     512kB time=00:00:10.00 bitrate= 419.4kbits/s speed=  20x"
        )
        assert progress is not None
        assert progress.frame is None
        assert progress.out_time_seconds == pytest.approx(10.0)

    def test_speed_not_available(self) -> None:
        progress = parse_stderr_progress("time=00:00:01.00 speed=N/A")
        assert progress is not None
        assert progress.speed is None

    @pytest.mark.parametrize(
        "line",
        ["", "Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'in.mp4':", "time=N/A"],
    )
    def test_non_status_lines(self, line: str) -> None:
        assert parse_stderr_progress(line) is None


class TestGetFraction:
    """Tests for FFmpegProgress.get_fraction."""

    def test_fraction_of_duration(self) -> None:
        assert FFmpegProgress(out_time_us=2_000_000).get_fraction(8.0) == 0.25

    def test_clamped_to_one(self) -> None:
        assert FFmpegProgress(out_time_us=9_000_000).get_fraction(8.0) == 1.0

    def test_unknown_values(self) -> None:
        assert FFmpegProgress().get_fraction(8.0) == 0.0
        assert FFmpegProgress(out_time_us=1).get_fraction(None) == 0.0
        assert FFmpegProgress(out_time_us=1).get_fraction(0) == 0.0
