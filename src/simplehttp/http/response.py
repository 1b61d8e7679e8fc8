"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

This module holds the HTTPResponse container, the generated HTML error
pages, and the serializer that turns a response into wire bytes.

=============================================================================
HTTP RESPONSE STRUCTURE
=============================================================================

Every response this server sends has the same shape, in a fixed order:

    HTTP/1.1 200 OK\r\n                        ◄── Status line
    Server: SimpleHTTP/1.0\r\n                 ◄── Fixed header set
    Date: Sun, 06 Nov 1994 08:49:37 GMT\r\n
    Content-Type: text/html\r\n
    Content-Length: 1270\r\n
    Connection: close\r\n
    Allow: GET\r\n                             ◄── Extra headers, if any
    \r\n                                       ◄── Blank line
    <!DOCTYPE html>...                         ◄── Body (raw bytes)

Connection: close is always sent. The server handles exactly one request
per TCP connection, so it tells the client not to wait for more.

Content-Length is always the exact byte length of the body. Since we
close the connection anyway the client could read until EOF, but with
the length it can tell a complete response from a truncated one.

=============================================================================
ERROR PAGES
=============================================================================

Errors get a small generated HTML page rather than an empty body, so a
browser shows something readable:

    ┌─────────────────────────────────┐
    │ 404 Not Found                   │  ◄── <h1>, status line text
    │                                 │
    │ Not Found                       │  ◄── <p>, short message
    │ ─────────────────────────────── │
    │ SimpleHTTP/1.0                  │  ◄── footer, server name
    └─────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "SimpleHTTP/1.0"

ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>{status}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 50px; }}
        h1 {{ color: #d32f2f; }}
        hr {{ border: none; border-top: 1px solid #ccc; }}
        .footer {{ font-style: italic; color: #666; }}
    </style>
</head>
<body>
    <h1>{status}</h1>
    <p>{message}</p>
    <hr>
    <div class="footer">{server_name}</div>
</body>
</html>"""


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        StaticFileHandler         to_bytes()               Connection
        builds HTTPResponse ───►  serializes    ───►       sendall()
                                  │
        HTTPResponse(             b"HTTP/1.1 200 OK\\r\\n
          status=200,               Server: ...\\r\\n
          content_type=...,         ...
          body=b"...",              \\r\\n
        )                           <body bytes>"

    Created once per request, consumed once by the serializer.

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = "application/octet-stream"
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)  # Extra headers
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status.line}"

    @property
    def is_ok(self) -> bool:
        """Check if this is a 200 OK response."""
        return self.status == HTTPStatus.OK

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME, now: Optional[datetime] = None) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        =====================================================================
        HEADER ORDER
        =====================================================================

        The order is fixed and does not depend on the extra headers:

            1. Status line
            2. Server
            3. Date             (now, UTC)
            4. Content-Type
            5. Content-Length   (len(body), always recomputed)
            6. Connection: close
            7. Extra headers, in insertion order
            8. Blank line, then body

        =====================================================================

        Args:
            server_name: Value of the Server header.
            now: Time for the Date header. Defaults to the current UTC time.

        Returns:
            Complete HTTP response as bytes, ready for sendall().
        """
        if now is None:
            now = datetime.now(timezone.utc)

        lines = [
            self.status_line,
            f"Server: {server_name}",
            f"Date: {format_http_date(now)}",
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
            "Connection: close",
        ]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 1123 form).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 06 Nov 1994 08:49:37 GMT

    HTTP dates are always in GMT (UTC), never local time. Aware datetimes
    are converted; naive ones are assumed to already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def error_page(status: HTTPStatus, message: str, server_name: str = DEFAULT_SERVER_NAME) -> str:
    """Render the HTML page used as the body of every error response."""
    return ERROR_PAGE_TEMPLATE.format(
        status=status.line,
        message=message,
        server_name=server_name,
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One function per response the server can produce:
#
#     return file_response(content, "application/json")
#     return not_found()
#
# =============================================================================

def file_response(content: bytes, content_type: str) -> HTTPResponse:
    """200 OK carrying a file's content."""
    return HTTPResponse(status=HTTPStatus.OK, content_type=content_type, body=content)


def error_response(
    status: HTTPStatus,
    message: str,
    server_name: str = DEFAULT_SERVER_NAME,
) -> HTTPResponse:
    """
    Create an error response with a generated HTML body.

    Content-Type is always text/html for these.
    """
    return HTTPResponse(
        status=status,
        content_type="text/html",
        body=error_page(status, message, server_name).encode("utf-8"),
    )


def bad_request(server_name: str = DEFAULT_SERVER_NAME) -> HTTPResponse:
    """400: the request line or headers could not be parsed."""
    return error_response(HTTPStatus.BAD_REQUEST, "Bad Request", server_name)


def not_found(server_name: str = DEFAULT_SERVER_NAME) -> HTTPResponse:
    """404: unsafe path, missing file, or a directory."""
    return error_response(HTTPStatus.NOT_FOUND, "Not Found", server_name)


def method_not_allowed(allowed_methods: list[str], server_name: str = DEFAULT_SERVER_NAME) -> HTTPResponse:
    """
    405 Method Not Allowed.

    Includes an Allow header listing the valid methods (RFC 7231 requires it).
    """
    response = error_response(HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed", server_name)
    response.headers["Allow"] = ", ".join(allowed_methods)
    return response


def internal_error(server_name: str = DEFAULT_SERVER_NAME) -> HTTPResponse:
    """500: the file exists but could not be read."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error", server_name)
