"""Per-connection byte accounting for outgoing downloads.

A ``TransferSession`` belongs to exactly one response. ``ProgressWriter``
sits between the response and the ASGI ``send`` callable: every message is
forwarded untouched, and body bytes that were actually handed to the server
are added to the session before a progress line is drawn.
"""

import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TextIO

from .sizes import format_size


Message = Dict[str, Any]
Send = Callable[[Message], Awaitable[None]]


@dataclass
class TransferSession:
    """Byte counters of one download response."""

    start_offset: int
    total_size: int
    stop: Optional[int] = None
    written: int = 0
    interrupted: bool = False

    def __post_init__(self) -> None:
        if self.stop is None:
            self.stop = self.total_size

    @property
    def transferred(self) -> int:
        """Bytes of the file the client now holds (offset + this session)."""
        return self.start_offset + self.written

    @property
    def expected(self) -> int:
        """Bytes this session has to deliver."""
        return self.stop - self.start_offset

    @property
    def percent(self) -> float:
        if self.total_size <= 0:
            return 100.0
        return self.transferred / self.total_size * 100

    @property
    def complete(self) -> bool:
        if self.interrupted:
            return False
        return self.start_offset + self.written == self.stop

    def add(self, n: int) -> None:
        self.written += n

    def interrupt(self) -> None:
        """The client went away; later sends are no longer counted."""
        self.interrupted = True


class ProgressLine:
    """Single console line redrawn in place with ``\\r``."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def update(self, session: TransferSession) -> None:
        """Redraw the line with the session's current percentage."""
        self.stream.write(
            f"\r {session.percent:.1f}% "
            f"({format_size(session.transferred)}/{format_size(session.total_size)})   "
        )
        self.stream.flush()

    def finish(self) -> None:
        """Move off the progress line so following log output starts clean."""
        self.stream.write("\n")
        self.stream.flush()


class ProgressWriter:
    """ASGI ``send`` decorator that counts delivered body bytes."""

    def __init__(self, send: Send, session: TransferSession, reporter: Optional[ProgressLine] = None) -> None:
        self._send = send
        self.session = session
        self.reporter = reporter

    async def __call__(self, message: Message):
        # Errors from the wrapped sink propagate; nothing is counted for a failed send.
        result = await self._send(message)
        if message.get("type") == "http.response.body":
            n = len(message.get("body", b""))
            # A server may drop sends silently once the client is gone.
            if n and not self.session.interrupted:
                self.session.add(n)
                if self.reporter is not None:
                    self.reporter.update(self.session)
        return result
