"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire.

A static file server only needs a handful of them:

    ┌──────┬─────────────────────────┬──────────────────────────────────┐
    │ Code │ Phrase                  │ When                             │
    ├──────┼─────────────────────────┼──────────────────────────────────┤
    │ 200  │ OK                      │ File found and read              │
    │ 400  │ Bad Request             │ Request line/headers unparsable  │
    │ 404  │ Not Found               │ Unsafe path, missing file, dir   │
    │ 405  │ Method Not Allowed      │ Anything other than GET          │
    │ 500  │ Internal Server Error   │ File exists but read failed      │
    └──────┴─────────────────────────┴──────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
        >>> HTTPStatus.NOT_FOUND.line
        '404 Not Found'
    """

    OK = 200

    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase, e.g. "Not Found"."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def line(self) -> str:
        """
        Code and phrase as they appear after the HTTP version:

            HTTP/1.1 404 Not Found
                     ─────────────
        """
        return f"{self.value} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
