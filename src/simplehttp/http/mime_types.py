"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a file extension to the Content-Type sent with the file.

    index.html  ──►  .html  ──►  text/html
    api.json    ──►  .json  ──►  application/json
    logo.PNG    ──►  .png   ──►  image/png        (case-insensitive)
    blob.xyz    ──►  .xyz   ──►  application/octet-stream

The table is fixed; there is no sniffing of file contents and no charset
parameter is appended. Anything not in the table is sent as
application/octet-stream.

=============================================================================
"""

from pathlib import Path


MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",

    # Media
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",

    # Documents, archives, binaries
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".wasm": "application/wasm",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path) -> str:
    """
    Get the MIME type for a file based on its extension.

    Examples:
        >>> get_mime_type("style.css")
        'text/css'
        >>> get_mime_type("/srv/www/IMAGE.JPG")
        'image/jpeg'
        >>> get_mime_type("Makefile")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
