"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Maps a parsed request onto a file under the document root and builds the
response: the file's bytes, or an HTML error page.

=============================================================================
DECISION TABLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Condition (checked in this order)        │ Response                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ method != GET                            │ 405, filesystem untouched│
    │ path contains ".." or "~"                │ 404                      │
    │ target missing, or a directory           │ 404                      │
    │ target exists but read fails             │ 500                      │
    │ otherwise                                │ 200 + file content       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

A path traversal attack tries to climb out of the document root:

    GET /../../../etc/passwd HTTP/1.1
    GET /~root/.ssh/id_rsa HTTP/1.1

The guard is a plain substring test: ANY occurrence of ".." or "~"
anywhere in the raw request path makes the request a 404, never 403.
There is no path analysis, so harmless names like "/notes..txt" are
rejected too.

Known weak point: this is narrower than resolving the final path and
checking it is still inside the root (what Path.resolve() +
relative_to() would give). Symlinks inside the root are followed.

=============================================================================
PATH MAPPING
=============================================================================

    root = ./www

    /                   ──►  ./www/index.html
    /docs/              ──►  ./www/docs/index.html
    /api.json           ──►  ./www/api.json
    /a//b.css           ──►  ./www/a/b.css
    /page.html?x=1      ──►  ./www/page.html?x=1   (not stripped → 404)

The request path is joined onto the root as-is; no URL decoding, no
query-string stripping.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, DEFAULT_SERVER_NAME,
    file_response, not_found, method_not_allowed, internal_error,
)
from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)


ALLOWED_METHODS = ["GET"]

# Substrings that make a request path unsafe
UNSAFE_MARKERS = ("..", "~")


def is_safe_path(path: str) -> bool:
    """
    Check a raw request path against the traversal markers.

        >>> is_safe_path("/css/style.css")
        True
        >>> is_safe_path("/../etc/passwd")
        False
        >>> is_safe_path("/~user/")
        False
    """
    return not any(marker in path for marker in UNSAFE_MARKERS)


class PathResolver:
    """
    Answers "is this path safe, and what file does it map to".

    Usage:
        resolver = PathResolver("./www")
        resolver.resolve("/")            # Path("www/index.html")
        resolver.resolve("/../secret")   # None
        resolver.resolve("/missing")     # None
    """

    def __init__(self, root_dir: str | Path, index_file: str = "index.html"):
        """
        Args:
            root_dir: Document root. Not resolved to an absolute path, the
                      request path is joined onto it exactly as configured.
            index_file: File served for paths ending in "/".
        """
        self.root_dir = Path(root_dir)
        self.index_file = index_file

    def target_for(self, request_path: str) -> Path:
        """
        Join a request path onto the root, without any checks.

        Leading slashes are stripped first: Path("www") / "/x" would
        otherwise discard the root and give Path("/x").
        """
        target = self.root_dir / request_path.lstrip("/")
        if request_path.endswith("/"):
            target = target / self.index_file
        return target

    def resolve(self, request_path: str) -> Optional[Path]:
        """
        Resolve a request path to a servable file.

        Returns:
            Path of an existing, non-directory file, or None for
            "not found" (unsafe path, missing, or a directory).
        """
        if not is_safe_path(request_path):
            logger.warning(f"Path traversal attempt: {request_path}")
            return None

        target = self.target_for(request_path)

        try:
            if not target.exists() or target.is_dir():
                return None
        except (OSError, ValueError):
            # ValueError: embedded NUL byte in the path
            return None

        return target


class StaticFileHandler:
    """
    Handler for serving static files.

    =========================================================================
    FLOW
    =========================================================================

        Request: GET /css/style.css

        1. Method check: only GET
        2. PathResolver: safe? exists? not a directory?
        3. Read the whole file
        4. 200 with the MIME type of the file extension

    The handler does no I/O besides the existence check and the one file
    read, and keeps no state between requests, so one instance is shared
    by every connection thread.

    =========================================================================
    """

    def __init__(
        self,
        root_dir: str | Path,
        index_file: str = "index.html",
        server_name: str = DEFAULT_SERVER_NAME,
    ):
        """
        Args:
            root_dir: Document root to serve files from.
            index_file: Default file for directory requests.
            server_name: Shown in the footer of error pages.
        """
        self.resolver = PathResolver(root_dir, index_file)
        self.server_name = server_name

    @property
    def root_dir(self) -> Path:
        return self.resolver.root_dir

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Build the response for a request.

        Args:
            request: The parsed HTTP request.

        Returns:
            HTTP response with the file content or an error page.
        """
        # ─────────────────────────────────────────────────────────────────
        # METHOD CHECK
        # ─────────────────────────────────────────────────────────────────
        # Checked first, so a POST never touches the filesystem
        if request.method not in ALLOWED_METHODS:
            return method_not_allowed(ALLOWED_METHODS, self.server_name)

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE
        # ─────────────────────────────────────────────────────────────────
        path = self.resolver.resolve(request.path)
        if path is None:
            return not_found(self.server_name)

        return self._serve_file(path)

    def _serve_file(self, path: Path) -> HTTPResponse:
        """
        Read a file and wrap it in a 200 response.

        Note: the whole file is read into memory; there is no streaming.
        """
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Error reading file {path}: {e}")
            return internal_error(self.server_name)

        return file_response(content, get_mime_type(path))
