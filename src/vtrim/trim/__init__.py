"""Trim planning and batch orchestration."""

from vtrim.trim.models import (
    BatchResult,
    BatchState,
    ProcessedFile,
    SkippedFile,
    TrimRequest,
)
from vtrim.trim.orchestrator import BatchOrchestrator, BatchProgressCallback
from vtrim.trim.planner import (
    TrimWindow,
    coerce_seconds,
    output_filename,
    plan_trim,
    sanitize_base_name,
)

__all__ = [
    "BatchOrchestrator",
    "BatchProgressCallback",
    "BatchResult",
    "BatchState",
    "ProcessedFile",
    "SkippedFile",
    "TrimRequest",
    "TrimWindow",
    "coerce_seconds",
    "output_filename",
    "plan_trim",
    "sanitize_base_name",
]
