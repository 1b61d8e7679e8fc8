"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the bytes a client sends into an HTTPRequest, or fails with
HTTPParseError.

=============================================================================
WHAT WE ACCEPT
=============================================================================

    GET /index.html HTTP/1.1\r\n        ◄── Request line: exactly 3 tokens
    Host: localhost:8080\r\n            ◄── Header: "Key: Value"
    User-Agent: curl/8.0\r\n
    \r\n                                ◄── Empty line: end of headers

This is a GET-only static file server, so we never read a body. Parsing
stops at the empty line; anything after it is left unread.

=============================================================================
PARSING RULES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Input                              │ Result                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ "GET / HTTP/1.1"                   │ OK                             │
    │ "GET  /   HTTP/1.1" (extra spaces) │ OK (split on any whitespace)   │
    │ "GET /"                            │ HTTPParseError (2 tokens)      │
    │ "GET / HTTP/1.1 extra"             │ HTTPParseError (4 tokens)      │
    │ "Content-Type: text/html"          │ headers["content-type"]        │
    │ "garbage-without-colon"            │ skipped, not an error          │
    │ request line + headers > limit     │ HTTPParseError                 │
    │ stream ends before the empty line  │ HTTPParseError                 │
    └─────────────────────────────────────────────────────────────────────┘

Method and version are not validated here. The parser only checks shape;
deciding that POST is not allowed is the response builder's job, and it
answers 405 rather than 400.

=============================================================================
BOUNDED MEMORY
=============================================================================

Every byte we read counts against max_request_size (8 KB by default).
Each read_line() call gets only the budget that is left, so a client that
sends one endless header line, or ten thousand short ones, is cut off at
the same point:

    budget = 8192
    read_line(8192) → "GET / HTTP/1.1\r\n"      16 bytes, budget = 8176
    read_line(8176) → "Host: x\r\n"              9 bytes, budget = 8167
    ...
    read_line(0)    → HTTPParseError

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import Dict, Protocol

from ..core.connection import LineTooLongError


class HTTPParseError(Exception):
    """
    Raised when a request cannot be turned into an HTTPRequest.

    Covers a malformed request line, an oversized request, and any
    failure while reading the request line or headers (timeout, reset,
    stream closed early). The server answers all of them with
    400 Bad Request.
    """


class LineReader(Protocol):
    """Anything that hands out one line at a time under a byte budget."""

    def read_line(self, limit: int) -> bytes:
        ...


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Created once per connection and never modified afterwards.

    Attributes:
        method:         Request method exactly as sent ("GET", "POST", ...)
        path:           Request target exactly as sent, query string and all
        version:        Protocol version token ("HTTP/1.1")
        headers:        Header values keyed by LOWERCASE name
        client_address: (ip, port) of the client, for logging
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: tuple = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value, case-insensitively.

            request.get_header("User-Agent")  # same as "user-agent"
        """
        return self.headers.get(name.lower(), default)

    @property
    def remote(self) -> str:
        """Client endpoint as "ip:port"."""
        ip, port = self.client_address[:2]
        return f"{ip}:{port}"

    @property
    def user_agent(self) -> str:
        """Get the User-Agent header value."""
        return self.get_header("user-agent")


class RequestParser:
    """
    Reads a request line and headers from a LineReader.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        LineReader (Connection)
              │
              ▼
        ┌───────────────────────────────────────────────────────────────┐
        │  1. Read request line ─────► 3 whitespace tokens?             │
        │     │                         no → HTTPParseError             │
        │     ▼                                                          │
        │  2. Read header lines until an empty line                      │
        │     │  "Key: Value" → headers[key.lower()] = value             │
        │     │  no colon     → skip                                     │
        │     ▼                                                          │
        │  3. Build HTTPRequest                                          │
        └───────────────────────────────────────────────────────────────┘

    Any read failure along the way (budget exhausted, timeout, connection
    reset, peer closed early) is re-raised as HTTPParseError with the
    original exception chained.

    ==========================================================================
    """

    def __init__(self, max_request_size: int = 8192):
        """
        Args:
            max_request_size: Upper bound on request line + headers, in bytes.
        """
        self.max_request_size = max_request_size

    def parse(self, reader: LineReader, client_address: tuple = ("", 0)) -> HTTPRequest:
        """
        Parse one request from a reader.

        Args:
            reader: Source of lines, normally a Connection.
            client_address: Client's (ip, port), stored on the request.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed, too large, or
                            could not be read.
        """
        budget = self.max_request_size

        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        line = self._read_line(reader, budget, "request line")
        budget -= len(line)

        parts = self._decode(line).split()
        if len(parts) != 3:
            raise HTTPParseError(f"Invalid request line format: {self._decode(line).strip()!r}")

        method, path, version = parts

        # =====================================================================
        # STEP 2: Headers, up to the empty line
        # =====================================================================
        headers: Dict[str, str] = {}
        while True:
            line = self._read_line(reader, budget, "headers")
            budget -= len(line)

            text = self._decode(line).strip()
            if not text:
                break

            name, sep, value = text.partition(":")
            if not sep:
                continue  # Malformed header line, lenient parsing

            # Repeated headers: the last one wins
            headers[name.strip().lower()] = value.strip()

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _read_line(self, reader: LineReader, budget: int, what: str) -> bytes:
        """Read one line, translating every failure into HTTPParseError."""
        if budget <= 0:
            raise HTTPParseError(f"Request exceeds {self.max_request_size} bytes")

        try:
            return reader.read_line(budget)
        except LineTooLongError as e:
            raise HTTPParseError(f"Request exceeds {self.max_request_size} bytes") from e
        except OSError as e:
            raise HTTPParseError(f"Error reading {what}: {e}") from e

    @staticmethod
    def _decode(line: bytes) -> str:
        # Header bytes are ASCII in practice; never fail on stray bytes
        return line.decode("utf-8", errors="replace")


class BytesLineReader:
    """
    LineReader over an in-memory byte string.

    Same contract as Connection.read_line(), handy for parsing a request
    that is already fully in memory.
    """

    def __init__(self, data: bytes):
        self._stream = io.BytesIO(data)

    def read_line(self, limit: int) -> bytes:
        line = self._stream.readline(limit)
        if line.endswith(b"\n"):
            return line
        if len(line) >= limit:
            raise LineTooLongError(f"No line break within {limit} bytes")
        raise ConnectionError("Stream ended before end of line")


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple = ("", 0),
    max_size: int = 8192,
) -> HTTPRequest:
    """
    Parse an HTTP request held in memory.

    Example:
        request = parse_request(b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.path  # "/"
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(BytesLineReader(data), client_address)
