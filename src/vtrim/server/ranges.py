"""File responses with single-range ``Range`` support.

Browsers scrub through video previews with requests such as
``Range: bytes=1048576-``. Anything we cannot honour exactly (malformed,
multi-range, unsatisfiable) is answered with the whole file instead of
an error, since players retry with a fresh range anyway.
"""

from __future__ import annotations

import asyncio
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

from aiohttp import web

from vtrim.exceptions import NotFoundError

CHUNK_SIZE = 256 * 1024

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within a file of ``total`` bytes."""

    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


def parse_range_header(header: str | None, size: int) -> ByteRange | None:
    """Parse a ``Range`` header for a file of ``size`` bytes.

    Supports ``bytes=a-b``, ``bytes=a-`` (to end of file) and the suffix
    form ``bytes=-n`` (last n bytes). Ends past EOF are clamped.

    Returns:
        The range, or None when the header is absent, malformed,
        multi-range or unsatisfiable.
    """
    if not header or size <= 0:
        return None

    match = _RANGE_RE.match(header.strip().replace(" ", ""))
    if match is None:
        return None

    start_str, end_str = match.groups()
    if not start_str:
        if not end_str:
            return None
        suffix = int(end_str)
        if suffix == 0:
            return None
        return ByteRange(start=max(0, size - suffix), end=size - 1, total=size)

    start = int(start_str)
    end = min(int(end_str), size - 1) if end_str else size - 1
    if start >= size or end < start:
        return None
    return ByteRange(start=start, end=end, total=size)


async def _stream_slice(
    response: web.StreamResponse, path: Path, start: int, length: int
) -> None:
    with path.open("rb") as fh:
        fh.seek(start)
        remaining = length
        while remaining > 0:
            chunk = await asyncio.to_thread(fh.read, min(CHUNK_SIZE, remaining))
            if not chunk:
                break
            await response.write(chunk)
            remaining -= len(chunk)


async def serve_file(
    request: web.Request,
    path: Path,
    *,
    allow_ranges: bool = True,
    attachment_name: str | None = None,
    content_type: str | None = None,
) -> web.StreamResponse:
    """Stream ``path`` as a 200 full response or a 206 partial response.

    Args:
        request: Incoming request; its ``Range`` header is consulted when
            ``allow_ranges`` is true.
        path: File to send.
        allow_ranges: Honour ``Range`` and advertise ``Accept-Ranges``.
        attachment_name: When set, full responses carry
            ``Content-Disposition: attachment`` with this name.
        content_type: Overrides the type guessed from the file name.

    Raises:
        NotFoundError: If ``path`` is not an existing file.
    """
    try:
        size = path.stat().st_size
    except OSError:
        raise NotFoundError(f"File not found: {path.name}") from None
    if not path.is_file():
        raise NotFoundError(f"File not found: {path.name}")

    if content_type is None:
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    byte_range = (
        parse_range_header(request.headers.get("Range"), size) if allow_ranges else None
    )

    if byte_range is not None:
        response = web.StreamResponse(status=206)
        response.headers["Content-Range"] = byte_range.content_range
        start, length = byte_range.start, byte_range.length
    else:
        response = web.StreamResponse(status=200)
        if attachment_name:
            response.headers["Content-Disposition"] = (
                f'attachment; filename="{attachment_name}"'
            )
        start, length = 0, size

    if allow_ranges:
        response.headers["Accept-Ranges"] = "bytes"
    response.content_type = content_type
    response.content_length = length

    await response.prepare(request)
    if request.method != "HEAD":
        await _stream_slice(response, path, start, length)
    await response.write_eof()
    return response
