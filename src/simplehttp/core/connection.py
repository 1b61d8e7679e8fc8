"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket with the small API the
connection handler needs: read a line, send a response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP only guarantees that bytes arrive in order and intact. It does NOT
preserve the boundaries of the writes the client made:

    Client sends:                      Server might recv():
        "GET / HTTP/1.1\r\n"               "GET / HT"
        "Host: x\r\n"                      "TP/1.1\r\nHost: x\r\n\r\n"
        "\r\n"

So we keep a private buffer, append every recv() to it, and hand out one
complete line (ending in \n) at a time. Whatever follows the line stays in
the buffer for the next call.

=============================================================================
DEADLINES, NOT PER-CALL TIMEOUTS
=============================================================================

socket.settimeout() applies to each individual recv()/send() call. A slow
client that trickles one byte every 29 seconds would never trip a 30 second
per-call timeout. Instead we fix an absolute deadline when the handler
starts and, before every socket operation, set the timeout to whatever is
left of it:

    set_deadlines(30, 30)          t = 0s
    recv()  timeout = 30.0         t = 12s  (client was slow)
    recv()  timeout = 18.0         t = 20s
    sendall() uses the write deadline, computed the same way

Once the deadline has passed, the next operation raises TimeoutError
without touching the socket.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

    ACCEPTED ──► PARSING ──► BUILDING ──► SENDING ──► CLOSED
        │            │           │            │          ▲
        └────────────┴───────────┴────────────┴──────────┘
                    (any stage may fail straight to CLOSED)

The connection is closed unconditionally when the handler returns;
`with conn:` does that.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class LineTooLongError(ValueError):
    """Raised when no line break shows up within the allowed byte budget."""


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and debugging; the handler moves the connection
    through them in order.
    """
    ACCEPTED = "accepted"    # Just accepted, nothing read yet
    PARSING = "parsing"      # Reading the request line and headers
    BUILDING = "building"    # Request parsed, response being built
    SENDING = "sending"      # Writing the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED LINE READING                                            │
    │     └── recv() chunks accumulate in _buffer                          │
    │     └── read_line() returns exactly one line per call                │
    │     └── a byte budget stops a client from growing the buffer forever │
    │                                                                      │
    │  2. DEADLINES                                                        │
    │     └── absolute read and write deadlines, fixed per connection      │
    │                                                                      │
    │  3. SENDING                                                          │
    │     └── sendall(), failures are raised to the caller                 │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── FIN, drain, close: no RST that could eat our response        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096           # How much to recv() at once
    drain_timeout: float = 0.5        # Total time close() spends draining
    max_drain_bytes: int = 8192       # Most leftover bytes close() reads

    _buffer: bytes = field(default=b"", repr=False)
    _read_deadline: Optional[float] = field(default=None, repr=False)
    _write_deadline: Optional[float] = field(default=None, repr=False)

    def __post_init__(self):
        # The listening socket polls with a timeout; make sure the accepted
        # socket starts out blocking regardless of what it inherited.
        self.socket.setblocking(True)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else ""

    @property
    def remote(self) -> str:
        """Client endpoint as "ip:port" for log lines."""
        if not self.address:
            return "unknown"
        return f"{self.address[0]}:{self.address[1]}"

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # DEADLINES
    # =========================================================================

    def set_deadlines(self, read_timeout: Optional[float], write_timeout: Optional[float]):
        """
        Fix absolute read and write deadlines, counted from now.

        Args:
            read_timeout: Seconds allowed for all reads. None = no deadline.
            write_timeout: Seconds allowed for all writes. None = no deadline.
        """
        now = time.monotonic()
        self._read_deadline = now + read_timeout if read_timeout else None
        self._write_deadline = now + write_timeout if write_timeout else None

    def _apply_deadline(self, deadline: Optional[float]):
        """Set the socket timeout to what is left of a deadline."""
        if deadline is None:
            self.socket.settimeout(None)
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError(f"[{self.id}] Connection deadline exceeded")
        self.socket.settimeout(remaining)

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self, limit: int) -> bytes:
        """
        Read one line, including its trailing \\n.

        ┌─────────────────────────────────────────────────────────────────┐
        │                     read_line() Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   ┌─────────────────────────────┐                               │
        │   │ \\n within first `limit`     │──yes──► split off line, return│
        │   │ bytes of the buffer?        │                               │
        │   └──────────────┬──────────────┘                               │
        │                  │ no                                            │
        │   ┌──────────────▼──────────────┐                               │
        │   │ buffer already >= limit?    │──yes──► LineTooLongError      │
        │   └──────────────┬──────────────┘                               │
        │                  │ no                                            │
        │   ┌──────────────▼──────────────┐                               │
        │   │ recv() under read deadline  │──b""──► ConnectionError       │
        │   └──────────────┬──────────────┘                               │
        │                  └──────────► append to buffer, loop             │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Args:
            limit: Maximum number of bytes the line may occupy.

        Returns:
            The line bytes, terminator included.

        Raises:
            LineTooLongError: No line break within `limit` bytes.
            ConnectionError: Peer closed the stream before a line break.
            TimeoutError: Read deadline expired.
        """
        while True:
            newline = self._buffer.find(b"\n", 0, limit)
            if newline != -1:
                line = self._buffer[:newline + 1]
                self._buffer = self._buffer[newline + 1:]
                return line

            if len(self._buffer) >= limit:
                raise LineTooLongError(f"No line break within {limit} bytes")

            self._apply_deadline(self._read_deadline)
            chunk = self.socket.recv(self.buffer_size)
            if not chunk:
                raise ConnectionError("Connection closed before end of line")

            self._buffer += chunk

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes):
        """
        Send response bytes to the client.

        sendall() keeps calling send() until every byte is queued, so we
        never put half a response on the wire and report success.

        Raises:
            OSError: Any transport failure, including TimeoutError when the
                     write deadline expires. Nothing is retried.
        """
        self.state = ConnectionState.SENDING
        self._apply_deadline(self._write_deadline)
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

            Server                              Client
               │   FIN ──────────────────────────► │  shutdown(SHUT_WR)
               │ ◄──────────────────────── data?   │  drain leftovers
               │ ◄───────────────────────── FIN    │
            close()

        Closing a socket that still has unread bytes in its receive buffer
        makes the kernel send RST, and an RST can reach the client before
        it has read our response. Draining first avoids that.

        The drain is bounded by drain_timeout in total (not per recv) and
        by max_drain_bytes, so a peer that keeps trickling data cannot hold
        the connection open. Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """Read and discard leftovers until EOF, the drain deadline, or the byte cap."""
        end = time.monotonic() + self.drain_timeout
        drained = 0

        try:
            while drained < self.max_drain_bytes:
                remaining = end - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(min(1024, self.max_drain_bytes - drained))
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset while draining, closing anyway

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure the connection is closed, without suppressing exceptions."""
        self.close()
        return False
