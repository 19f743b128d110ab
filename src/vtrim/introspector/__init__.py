"""Media probing: duration lookup for uploaded videos."""

from vtrim.introspector.ffprobe import FFprobeProbe, parse_duration
from vtrim.introspector.interface import MediaProbe
from vtrim.introspector.stub import StubProbe

__all__ = [
    "FFprobeProbe",
    "MediaProbe",
    "StubProbe",
    "parse_duration",
]
