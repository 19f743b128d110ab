"""Stub MediaProbe for development and testing."""

from __future__ import annotations

from pathlib import Path

from vtrim.exceptions import ProbeError


class StubProbe:
    """Returns scripted durations keyed by file name.

    Files without an entry fall back to ``default``; when ``default`` is
    None they raise ProbeError, which lets tests exercise the skip path.
    """

    def __init__(
        self,
        durations: dict[str, float] | None = None,
        default: float | None = None,
    ) -> None:
        self.durations = dict(durations or {})
        self.default = default
        self.calls: list[Path] = []

    def get_duration(self, path: Path) -> float:
        self.calls.append(path)
        if not path.exists():
            raise ProbeError(f"File not found: {path}")
        duration = self.durations.get(path.name, self.default)
        if duration is None:
            raise ProbeError(f"No scripted duration for {path.name}")
        return duration
