"""Tests for FFmpegExecutorBase."""

import itertools
import sys
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vtrim.executor.ffmpeg_base import FFmpegExecutorBase
from vtrim.tools.detection import ToolInfo, ToolNotAvailableError
from vtrim.tools.ffmpeg_progress import FFmpegProgress


class ConcreteExecutor(FFmpegExecutorBase):
    """Concrete implementation for testing abstract base class."""

    pass


def _process(returncode: int, lines: list[str]) -> MagicMock:
    mock_process = MagicMock()
    mock_process.returncode = returncode
    mock_process.poll.return_value = returncode
    mock_process.stderr.__iter__ = lambda self: iter(lines)
    mock_process.wait.return_value = returncode
    return mock_process


class TestFFmpegExecutorBaseInit:
    """Tests for construction and tool resolution."""

    def test_default_timeout(self) -> None:
        assert ConcreteExecutor().timeout == FFmpegExecutorBase.DEFAULT_TIMEOUT

    def test_zero_timeout_disables_limit(self) -> None:
        assert ConcreteExecutor(timeout=0).timeout is None

    @patch("vtrim.executor.ffmpeg_base.require_tool")
    def test_tool_path_is_lazy_and_cached(self, mock_require: MagicMock) -> None:
        mock_require.return_value = Path("/usr/bin/ffmpeg")
        executor = ConcreteExecutor(ffmpeg_path=Path("/opt/ffmpeg"))
        mock_require.assert_not_called()

        assert executor.tool_path == Path("/usr/bin/ffmpeg")
        _ = executor.tool_path

        mock_require.assert_called_once_with("ffmpeg", Path("/opt/ffmpeg"))

    @patch("vtrim.executor.ffmpeg_base.require_tool")
    def test_missing_tool_raises(self, mock_require: MagicMock) -> None:
        mock_require.side_effect = ToolNotAvailableError(ToolInfo(name="ffmpeg"))
        with pytest.raises(ToolNotAvailableError, match="ffmpeg"):
            _ = ConcreteExecutor().tool_path


class TestRunFFmpegWithTimeout:
    """Tests for _run_ffmpeg_with_timeout method."""

    def test_success(self) -> None:
        executor = ConcreteExecutor()
        with patch("vtrim.executor.ffmpeg_base.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(0, ["line one\n", "line two\n"])

            success, rc, stderr_lines = executor._run_ffmpeg_with_timeout(
                ["ffmpeg", "-i", "in.mp4", "out.mp4"], "test operation"
            )

        assert success is True
        assert rc == 0
        assert stderr_lines == ["line one\n", "line two\n"]

    def test_failure(self) -> None:
        executor = ConcreteExecutor()
        with patch("vtrim.executor.ffmpeg_base.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(1, ["Invalid data found\n"])

            success, rc, stderr_lines = executor._run_ffmpeg_with_timeout(
                ["ffmpeg", "-i", "in.mp4", "out.mp4"], "test operation"
            )

        assert success is False
        assert rc == 1
        assert stderr_lines == ["Invalid data found\n"]

    def test_timeout_kills_process(self) -> None:
        executor = ConcreteExecutor()
        with (
            patch("vtrim.executor.ffmpeg_base.subprocess.Popen") as mock_popen,
            patch("vtrim.executor.ffmpeg_base.time.monotonic") as mock_time,
        ):
            mock_process = _process(-9, [])
            mock_process.poll.return_value = None
            mock_popen.return_value = mock_process
            mock_time.side_effect = itertools.chain([0.0], itertools.repeat(100.0))

            success, rc, _ = executor._run_ffmpeg_with_timeout(
                ["ffmpeg", "-i", "in.mp4", "out.mp4"], "test operation", timeout=10.0
            )

        assert success is False
        assert rc == -1
        mock_process.kill.assert_called_once()

    def test_progress_callback(self) -> None:
        executor = ConcreteExecutor()
        seen: list[FFmpegProgress] = []
        line = "frame=  100 fps= 30 time=00:00:03.50 bitrate=1000kbits/s speed=1.0x\n"

        with patch("vtrim.executor.ffmpeg_base.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(0, ["header\n", line])
            executor._run_ffmpeg_with_timeout(
                ["ffmpeg"], "test operation", progress_callback=seen.append
            )

        assert len(seen) == 1
        assert seen[0].frame == 100
        assert seen[0].out_time_seconds == pytest.approx(3.5)

    def test_callback_errors_do_not_abort(self) -> None:
        executor = ConcreteExecutor()

        def broken(_progress: FFmpegProgress) -> None:
            raise RuntimeError("boom")

        with patch("vtrim.executor.ffmpeg_base.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(0, ["time=00:00:01.00 speed=1x\n"])
            success, rc, _ = executor._run_ffmpeg_with_timeout(
                ["ffmpeg"], "test operation", progress_callback=broken
            )

        assert success is True
        assert rc == 0


class TestRunFFmpegWithTimeoutRealProcess:
    """Deadline handling against a real child process."""

    def test_silent_child_is_killed_at_deadline(self) -> None:
        executor = ConcreteExecutor()
        cmd = [sys.executable, "-c", "import time; time.sleep(15)"]

        started = time.monotonic()
        success, rc, lines = executor._run_ffmpeg_with_timeout(
            cmd, "sleeping child", timeout=1
        )
        elapsed = time.monotonic() - started

        assert (success, rc, lines) == (False, -1, [])
        assert elapsed < 6

    def test_output_before_deadline_is_returned(self) -> None:
        executor = ConcreteExecutor()
        script = (
            "import sys, time; "
            "sys.stderr.write('time=00:00:01.00 speed=1x\\n'); sys.stderr.flush(); "
            "time.sleep(15)"
        )

        success, rc, lines = executor._run_ffmpeg_with_timeout(
            [sys.executable, "-c", script], "chatty child", timeout=2
        )

        assert success is False
        assert rc == -1
        assert lines == ["time=00:00:01.00 speed=1x\n"]
