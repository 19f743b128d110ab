"""Sequential Probe -> Plan -> Execute over a batch of uploads.

Files are handled strictly one at a time. Each transcode is CPU and
memory heavy, and output names encode the input position, so the loop
never fans out. Per-file failures are logged and the file is left out
of the result; they never abort the batch.

Output names are fixed by input position before any check runs, so a
skipped second file leaves a gap: ``trimmed_1.mp4``, ``trimmed_3.mp4``.
Clients that assume contiguous numbering will be surprised.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

from vtrim.exceptions import EncodeError, FileProcessingError, StorageError
from vtrim.executor.interface import ProgressCallback, TrimEngine
from vtrim.introspector.interface import MediaProbe
from vtrim.logging.context import session_context
from vtrim.storage.sessions import UploadedFile
from vtrim.trim.models import (
    BatchResult,
    BatchState,
    ProcessedFile,
    SkippedFile,
    TrimRequest,
)
from vtrim.trim.planner import output_filename, plan_trim

logger = logging.getLogger(__name__)

BatchProgressCallback = Callable[[int, float], None]
"""Receives (1-based file index, fraction of that file done)."""


class BatchOrchestrator:
    """Runs one TrimRequest against a probe and a trim engine.

    Create one instance per request; ``state`` reflects progress and is
    COMPLETED once ``run`` returns.
    """

    def __init__(
        self,
        probe: MediaProbe,
        engine: TrimEngine,
        on_progress: BatchProgressCallback | None = None,
    ) -> None:
        self.probe = probe
        self.engine = engine
        self.on_progress = on_progress
        self.state = BatchState.PENDING

    def run(self, request: TrimRequest) -> BatchResult:
        """Process every file in order.

        Returns:
            Successes in request order plus the skipped entries. An
            empty ``processed`` list is a valid outcome.

        Raises:
            StorageError: If the output directory cannot be created.
        """
        result = BatchResult(session_id=request.session_id)
        base_name = request.base_name or request.default_base_name

        try:
            request.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create output directory: {e}") from e

        logger.info(
            "Batch %s: %d file(s), cuts %gs/%gs",
            request.session_id,
            len(request.files),
            request.trim_start,
            request.trim_end,
        )

        for index, uploaded in enumerate(request.files):
            position = index + 1
            file_name = output_filename(base_name, index, uploaded.original_name)
            with session_context(request.session_id, position):
                try:
                    processed = self._process_one(request, uploaded, file_name, position)
                except FileProcessingError as e:
                    logger.warning("Skipping %s: %s", uploaded.original_name, e)
                    if isinstance(e, EncodeError) and e.diagnostics:
                        logger.debug("ffmpeg output:\n%s", e.diagnostics)
                    result.skipped.append(
                        SkippedFile(position, uploaded.original_name, str(e))
                    )
                    continue
                if processed is None:
                    result.skipped.append(
                        SkippedFile(position, uploaded.original_name, "upload missing")
                    )
                    continue
                result.processed.append(processed)

        self.state = BatchState.COMPLETED
        logger.info(
            "Batch %s complete: %d processed, %d skipped",
            request.session_id,
            len(result.processed),
            len(result.skipped),
        )
        return result

    def _process_one(
        self,
        request: TrimRequest,
        uploaded: UploadedFile,
        file_name: str,
        position: int,
    ) -> ProcessedFile | None:
        source = uploaded.upload_path
        if not source.exists():
            logger.warning("Upload %s no longer exists, skipping", uploaded.original_name)
            return None

        self.state = BatchState.PROBING
        duration = self.probe.get_duration(source)

        self.state = BatchState.PLANNING
        window = plan_trim(duration, request.trim_start, request.trim_end)

        self.state = BatchState.EXECUTING
        output_path = request.output_dir / file_name
        progress: ProgressCallback | None = None
        if self.on_progress is not None:
            progress = functools.partial(self.on_progress, position)

        self.engine.execute(source, output_path, window, progress)
        logger.info(
            "Trimmed %s -> %s (%.3fs kept)",
            uploaded.original_name,
            file_name,
            window.duration,
        )
        return ProcessedFile(
            original_name=uploaded.original_name,
            file_name=file_name,
            output_path=output_path,
            session_id=request.session_id,
        )
