"""MediaProbe interface for duration lookup."""

from pathlib import Path
from typing import Protocol


class MediaProbe(Protocol):
    """Protocol for media duration probes.

    Implementations inspect a container and report its total duration.
    They have no side effects and may block.
    """

    def get_duration(self, path: Path) -> float:
        """Return the total duration of a media file.

        Args:
            path: Path to the media file.

        Returns:
            Duration in seconds, with sub-second precision.

        Raises:
            ProbeError: If the file is unreadable or not a media container.
        """
        ...
