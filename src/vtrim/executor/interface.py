"""TrimEngine interface for producing trimmed files."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from vtrim.trim.planner import TrimWindow

ProgressCallback = Callable[[float], None]
"""Receives completion of the current file as a fraction in [0, 1]."""


class TrimEngine(Protocol):
    """Protocol for trim executors.

    An engine cuts ``window`` out of ``input_path`` and writes the result
    to ``output_path``. The output must start at timestamp zero and be
    laid out for progressive playback.
    """

    def execute(
        self,
        input_path: Path,
        output_path: Path,
        window: TrimWindow,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Produce the trimmed file.

        Raises:
            EncodeError: If the output could not be produced. Only the
                current file is affected.
        """
        ...
