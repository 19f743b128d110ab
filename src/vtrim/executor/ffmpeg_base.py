"""Base class for ffmpeg-based executors.

Resolves the ffmpeg binary lazily and runs it under a deadline. stderr
is consumed on a helper thread so the caller can parse progress lines
and still notice when the deadline passes.
"""

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from abc import ABC
from collections.abc import Callable
from pathlib import Path

from vtrim.tools.detection import require_tool
from vtrim.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

logger = logging.getLogger(__name__)

_EOF = None


class _StderrPump:
    """Copy a process's stderr lines into a queue from a daemon thread."""

    def __init__(self, process: subprocess.Popen) -> None:
        self._process = process
        self._lines: queue.Queue[str | None] = queue.Queue()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._pump, daemon=True)

    def start(self) -> None:
        self._thread.start()

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def _pump(self) -> None:
        stream = self._process.stderr
        try:
            if stream is not None:
                for line in stream:
                    if self._stopped.is_set():
                        break
                    self._lines.put(line)
        except (ValueError, OSError) as e:
            logger.debug("stderr pump stopped: %s", e)
        finally:
            self._lines.put(_EOF)

    def next_line(self, wait: float) -> str | None:
        """Next line, or None at end of stream. Raises queue.Empty on idle."""
        return self._lines.get(timeout=wait)

    def drain(self, join_timeout: float) -> list[str]:
        """Stop the thread and return whatever it had already queued."""
        self._stopped.set()
        self._thread.join(timeout=join_timeout)
        rest: list[str] = []
        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                break
            if line is _EOF:
                break
            rest.append(line)
        return rest

    def close(self) -> None:
        """Close the pipe once the thread is done with it."""
        if self._thread.is_alive():
            logger.error("stderr reader still blocked after kill; abandoning it")
            return
        if self._process.stderr is not None:
            try:
                self._process.stderr.close()
            except OSError:  # nosec B110 - pipe already torn down
                pass


class FFmpegExecutorBase(ABC):
    """Shared plumbing for executors that shell out to ffmpeg."""

    DEFAULT_TIMEOUT: int = 1800
    STDERR_DRAIN_TIMEOUT: float = 5.0
    POLL_INTERVAL: float = 0.5

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            ffmpeg_path: Configured ffmpeg path; PATH lookup when None.
            timeout: Per-invocation limit in seconds. None uses
                DEFAULT_TIMEOUT; 0 disables the limit.
        """
        self._configured_path = ffmpeg_path
        self._tool_path: Path | None = None
        self._timeout = self.DEFAULT_TIMEOUT if timeout is None else timeout

    @property
    def tool_path(self) -> Path:
        """Path to ffmpeg, resolved on first use.

        Raises:
            ToolNotAvailableError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool("ffmpeg", self._configured_path)
        return self._tool_path

    @property
    def timeout(self) -> float | None:
        return self._timeout or None

    @staticmethod
    def _report(
        line: str, progress_callback: Callable[[FFmpegProgress], None] | None
    ) -> None:
        if progress_callback is None:
            return
        progress = parse_stderr_progress(line)
        if progress is None:
            return
        try:
            progress_callback(progress)
        except Exception as e:
            logger.warning("Progress callback error: %s", e)

    def _run_ffmpeg_with_timeout(
        self,
        cmd: list[str],
        description: str,
        timeout: float | None = None,
        progress_callback: Callable[[FFmpegProgress], None] | None = None,
    ) -> tuple[bool, int, list[str]]:
        """Run an ffmpeg command line to completion or until ``timeout``.

        Args:
            cmd: Full ffmpeg command line.
            description: Label for log messages.
            timeout: Seconds before the process is killed. None = no limit.
            progress_callback: Called with each parsed status line.

        Returns:
            Tuple of (success, return_code, stderr_lines). return_code is
            -1 when the timeout expired.
        """
        process = subprocess.Popen(  # nosec B603 - command built from fixed flags
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        pump = _StderrPump(process)
        pump.start()

        collected: list[str] = []
        deadline = None if timeout is None else time.monotonic() + timeout

        while deadline is None or time.monotonic() < deadline:
            try:
                line = pump.next_line(self.POLL_INTERVAL)
            except queue.Empty:
                if process.poll() is not None and not pump.alive:
                    break
                continue
            if line is _EOF:
                break
            collected.append(line)
            self._report(line, progress_callback)
        else:
            logger.warning("%s timed out after %s seconds", description, timeout)
            # close() blocks while the pump is mid-read, so kill first
            process.kill()
            process.wait()
            collected.extend(pump.drain(join_timeout=2.0))
            pump.close()
            return False, -1, collected

        collected.extend(pump.drain(join_timeout=self.STDERR_DRAIN_TIMEOUT))
        returncode = process.wait()
        return returncode == 0, returncode, collected
