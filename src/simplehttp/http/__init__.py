"""
=============================================================================
HTTP MODULE - Protocol Implementation
=============================================================================

    request.py       bytes ──► HTTPRequest           (RequestParser)
    response.py      HTTPResponse ──► bytes          (to_bytes)
    status_codes.py  the five statuses we send
    mime_types.py    file extension ──► Content-Type

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    format_http_date,
    error_page,
    file_response,
    error_response,
    bad_request,
    not_found,
    method_not_allowed,
    internal_error,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "format_http_date",
    "error_page",
    "file_response",
    "error_response",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
]
