"""ffmpeg trim executor.

Two policies produce the same window:

* copy: ``-ss`` before ``-i`` (input seek) and ``-t <length>`` with
  ``-c copy``. Fast and lossless; the cut snaps to a keyframe.
* reencode: ``-ss``/``-to`` after ``-i`` (output seek). Frame-accurate.
  The output keeps the upload's container, so the codecs follow the
  output suffix: ``.webm`` gets VP9 and Opus (WebM carries only
  VP8/VP9/AV1 with Vorbis/Opus), everything else gets H.264 and AAC.

Both normalise timestamps to start at zero. MP4-family outputs also get
the moov atom moved to the head of the file for progressive playback.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from vtrim.config.models import TrimPolicy, VTrimConfig
from vtrim.exceptions import EncodeError
from vtrim.executor import ffmpeg_utils
from vtrim.executor.ffmpeg_base import FFmpegExecutorBase
from vtrim.executor.interface import ProgressCallback
from vtrim.tools.detection import ToolNotAvailableError
from vtrim.tools.ffmpeg_progress import FFmpegProgress

if TYPE_CHECKING:
    from vtrim.trim.planner import TrimWindow

logger = logging.getLogger(__name__)

# Containers that understand -movflags
_FASTSTART_SUFFIXES = frozenset({".mp4", ".m4v", ".mov"})


def _fmt_seconds(value: float) -> str:
    # ffmpeg accepts plain decimal seconds; millisecond precision is enough
    return f"{value:.3f}"


class FFmpegTrimExecutor(FFmpegExecutorBase):
    """TrimEngine backed by ffmpeg.

    Example:
        executor = FFmpegTrimExecutor(policy=TrimPolicy.COPY)
        executor.execute(src, dst, plan_trim(10.0, 1.0, 1.0))
    """

    # libvpx-vp9 constant-quality level (0-63) used for WebM re-encodes
    VP9_CRF: int = 32

    def __init__(
        self,
        policy: TrimPolicy = TrimPolicy.COPY,
        ffmpeg_path: Path | None = None,
        timeout: float | None = None,
        video_crf: int = 23,
        video_preset: str = "medium",
        audio_bitrate: str = "192k",
    ) -> None:
        super().__init__(ffmpeg_path=ffmpeg_path, timeout=timeout)
        self.policy = TrimPolicy(policy)
        self.video_crf = video_crf
        self.video_preset = video_preset
        self.audio_bitrate = audio_bitrate

    @classmethod
    def from_config(cls, config: VTrimConfig) -> FFmpegTrimExecutor:
        """Create the executor described by ``config.trim`` and ``config.tools``."""
        return cls(
            policy=config.trim.policy,
            ffmpeg_path=config.tools.ffmpeg,
            timeout=config.trim.file_timeout,
            video_crf=config.trim.video_crf,
            video_preset=config.trim.video_preset,
            audio_bitrate=config.trim.audio_bitrate,
        )

    def build_command(
        self, input_path: Path, output_path: Path, window: TrimWindow
    ) -> list[str]:
        """Build the ffmpeg command line for one trim."""
        cmd = [str(self.tool_path), "-hide_banner", "-nostdin", "-y"]

        if self.policy is TrimPolicy.COPY:
            cmd += [
                "-ss",
                _fmt_seconds(window.start),
                "-i",
                str(input_path),
                "-t",
                _fmt_seconds(window.duration),
                "-c",
                "copy",
            ]
        else:
            cmd += [
                "-i",
                str(input_path),
                "-ss",
                _fmt_seconds(window.start),
                "-to",
                _fmt_seconds(window.end),
            ]
            cmd += self._encoder_args(output_path.suffix.casefold())

        cmd += ["-avoid_negative_ts", "make_zero"]
        if output_path.suffix.casefold() in _FASTSTART_SUFFIXES:
            cmd += ["-movflags", "+faststart"]
        cmd.append(str(output_path))
        return cmd

    def _encoder_args(self, suffix: str) -> list[str]:
        if suffix == ".webm":
            return [
                "-c:v",
                "libvpx-vp9",
                "-crf",
                str(self.VP9_CRF),
                "-b:v",
                "0",
                "-deadline",
                "good",
                "-cpu-used",
                "4",
                "-row-mt",
                "1",
                "-pix_fmt",
                "yuv420p",
                "-c:a",
                "libopus",
                "-b:a",
                self.audio_bitrate,
            ]
        return [
            "-c:v",
            "libx264",
            "-preset",
            self.video_preset,
            "-crf",
            str(self.video_crf),
            "-pix_fmt",
            "yuv420p",
            "-c:a",
            "aac",
            "-b:a",
            self.audio_bitrate,
        ]

    def execute(
        self,
        input_path: Path,
        output_path: Path,
        window: TrimWindow,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Trim ``input_path`` into ``output_path``.

        ffmpeg writes to a temp file beside the output, which is moved into
        place only after the output validates.

        Raises:
            EncodeError: On missing ffmpeg, non-zero exit, timeout, or an
                empty/missing output.
        """
        if not input_path.is_file():
            raise EncodeError(f"Input file not found: {input_path}")

        temp_path = ffmpeg_utils.create_temp_output(output_path)
        try:
            cmd = self.build_command(input_path, temp_path, window)
        except ToolNotAvailableError as e:
            raise EncodeError(str(e)) from e

        def on_progress(progress: FFmpegProgress) -> None:
            if progress_callback is not None:
                progress_callback(progress.get_fraction(window.duration))

        logger.info(
            "Trimming %s -> %s [%.3f, %.3f) policy=%s",
            input_path.name,
            output_path.name,
            window.start,
            window.end,
            self.policy.value,
        )

        try:
            success, rc, stderr_lines = self._run_ffmpeg_with_timeout(
                cmd,
                f"trim {input_path.name}",
                timeout=self.timeout,
                progress_callback=on_progress,
            )
        except OSError as e:
            ffmpeg_utils.cleanup_temp_file(temp_path)
            raise EncodeError(f"Could not start ffmpeg: {e}") from e

        diagnostics = ffmpeg_utils.stderr_tail(stderr_lines)
        if not success:
            ffmpeg_utils.cleanup_temp_file(temp_path)
            if rc == -1:
                raise EncodeError(
                    f"ffmpeg timed out after {self.timeout}s on {input_path.name}",
                    diagnostics,
                )
            raise EncodeError(
                f"ffmpeg exited with code {rc} on {input_path.name}", diagnostics
            )

        valid, error = ffmpeg_utils.validate_output(temp_path)
        if not valid:
            ffmpeg_utils.cleanup_temp_file(temp_path)
            raise EncodeError(error or "ffmpeg produced no output", diagnostics)

        try:
            os.replace(temp_path, output_path)
        except OSError as e:
            ffmpeg_utils.cleanup_temp_file(temp_path)
            raise EncodeError(f"Could not move output into place: {e}") from e

        if progress_callback is not None:
            progress_callback(1.0)
