import mimetypes
import re
import urllib.parse
from typing import NamedTuple, Optional

import anyio
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from .files import ServedFile
from .logging_config import log
from .progress import ProgressLine, ProgressWriter, TransferSession
from .settings import ServerSettings
from .sizes import format_size


_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.ASCII | re.IGNORECASE)
_TOKEN_SAFE_RE = re.compile(r"^[A-Za-z0-9!#$%&'*+.^_`|~-]+$")


class ByteRange(NamedTuple):
    start: int
    stop: int

    @property
    def length(self) -> int:
        return self.stop - self.start

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.stop - 1}/{size}"


class RangeNotSatisfiable(ValueError):
    """The Range header is well-formed but lies outside the file."""


def parse_range(header: Optional[str], size: int) -> Optional[ByteRange]:
    """Parse a single-range ``Range`` header against a file of ``size`` bytes.

    Returns ``None`` when the header should be ignored and the whole file
    served: no header, another unit, several ranges, or anything that is not
    a valid ``bytes=start-``, ``bytes=start-end`` or ``bytes=-suffix`` form.
    Raises ``RangeNotSatisfiable`` for a syntactically valid range that
    selects no byte of the file.
    """
    value = str(header or "")
    if "," in value:
        return None
    m = _RANGE_RE.match(value)
    if not m:
        return None
    left, right = m.group(1), m.group(2)
    if not left and not right:
        return None

    if not left:
        suffix = int(right)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(value)
        return ByteRange(max(0, size - suffix), size)

    start = int(left)
    stop = size if not right else int(right) + 1
    if start >= size or stop <= start:
        raise RangeNotSatisfiable(value)
    return ByteRange(start, min(stop, size))


def content_disposition(name: str) -> str:
    """``attachment`` disposition header for ``name``."""
    if _TOKEN_SAFE_RE.match(name):
        return f"attachment; filename={name}"
    try:
        name.encode("ascii")
    except UnicodeEncodeError:
        # Plain filename= for clients that ignore the RFC 5987 form.
        fallback = name.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment; filename=\"{_quote(fallback)}\"; filename*=UTF-8''{urllib.parse.quote(name)}"
    return f'attachment; filename="{_quote(name)}"'


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _remote(request: Request) -> str:
    client = request.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"


def _range_applies(request: Request, served: ServedFile) -> bool:
    """An ``If-Range`` that does not match the file voids the Range header."""
    if_range = request.headers.get("if-range")
    if if_range is None:
        return True
    return if_range.strip() == served.last_modified


class RangeFileResponse(Response):
    """Streams ``[start, stop)`` of the served file through a ``ProgressWriter``."""

    def __init__(
        self,
        served: ServedFile,
        session: TransferSession,
        *,
        status_code: int,
        headers: dict,
        media_type: str,
        chunk_size: int,
        reporter: Optional[ProgressLine] = None,
    ) -> None:
        self.served = served
        self.session = session
        self.status_code = status_code
        self.media_type = media_type
        self.chunk_size = max(1, int(chunk_size))
        self.reporter = reporter
        self.background = None
        self.init_headers(headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        writer = ProgressWriter(send, self.session, self.reporter)
        error: Optional[Exception] = None
        try:
            async with await anyio.open_file(self.served.path, mode="rb") as f:
                await writer({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
                async with anyio.create_task_group() as tg:
                    tg.start_soon(self._watch_disconnect, receive, tg.cancel_scope)
                    try:
                        await self._stream(f, writer)
                    except Exception as exc:
                        # Re-raised below so callers see the sink error itself, not a group.
                        error = exc
                    tg.cancel_scope.cancel()
            if error is not None:
                raise error
        finally:
            self._report_outcome()

    async def _stream(self, f, writer: ProgressWriter) -> None:
        await f.seek(self.session.start_offset)
        remaining = self.session.expected
        while remaining > 0:
            chunk = await f.read(min(self.chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            await writer({"type": "http.response.body", "body": chunk, "more_body": True})
        await writer({"type": "http.response.body", "body": b"", "more_body": False})

    async def _watch_disconnect(self, receive: Receive, cancel_scope: anyio.CancelScope) -> None:
        # uvicorn drops sends after a disconnect instead of raising, so listen for it.
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                self.session.interrupt()
                cancel_scope.cancel()
                return

    def _report_outcome(self) -> None:
        session = self.session
        if session.written and self.reporter is not None:
            self.reporter.finish()
        if session.complete:
            log.info(
                "Transfer complete! %s total (%d bytes)",
                format_size(session.transferred),
                session.transferred,
            )
        else:
            log.warning(
                "Transfer interrupted (%s transferred, %d/%d bytes)",
                format_size(session.transferred),
                session.transferred,
                session.total_size,
            )


def build_file_response(
    request: Request,
    served: ServedFile,
    settings: ServerSettings,
    reporter: Optional[ProgressLine] = None,
) -> Response:
    """Answer a download request for the served file, honouring a single Range."""
    range_header = request.headers.get("range")
    try:
        byte_range = parse_range(range_header, served.size) if _range_applies(request, served) else None
    except RangeNotSatisfiable:
        log.info("Unsatisfiable range from %s: %s", _remote(request), range_header)
        return Response(
            status_code=416,
            headers={"Content-Range": f"bytes */{served.size}", "Accept-Ranges": "bytes"},
        )

    headers = {
        "Accept-Ranges": "bytes",
        "Last-Modified": served.last_modified,
        "Content-Disposition": content_disposition(served.name),
    }
    if byte_range is None:
        status_code = 200
        start, stop = 0, served.size
    else:
        status_code = 206
        start, stop = byte_range
        headers["Content-Range"] = byte_range.content_range(served.size)
    headers["Content-Length"] = str(stop - start)
    media_type = mimetypes.guess_type(served.name)[0] or "application/octet-stream"

    if request.method == "HEAD":
        return Response(status_code=status_code, headers=headers, media_type=media_type)

    if byte_range is None:
        log.info("New connection: %s", _remote(request))
    else:
        log.info("Resumed transfer: %s (from %s)", _remote(request), range_header)
    log.info("Starting transfer: %s (%s)", served.name, format_size(served.size))

    session = TransferSession(start_offset=start, total_size=served.size, stop=stop)
    return RangeFileResponse(
        served,
        session,
        status_code=status_code,
        headers=headers,
        media_type=media_type,
        chunk_size=settings.chunk_size,
        reporter=reporter,
    )
