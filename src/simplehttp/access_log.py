"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per handled request, on its own logger so it can be routed
or silenced separately from the server's diagnostic output:

    logging.getLogger("simplehttp.access").setLevel(logging.WARNING)

=============================================================================
FORMATS
=============================================================================

text (default), readable in a terminal:

    127.0.0.1:53422 "GET /index.html HTTP/1.1" - 200 OK (1.42ms) "curl/8.0"

json, one object per line for log aggregators:

    {"client": "127.0.0.1:53422", "method": "GET", "path": "/index.html",
     "version": "HTTP/1.1", "status": 200, "status_line": "200 OK",
     "bytes": 1270, "duration_ms": 1.42, "user_agent": "curl/8.0"}

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict


logger = logging.getLogger("simplehttp.access")


@dataclass
class RequestLog:
    """Structured log entry for one request."""

    client: str
    method: str
    path: str
    version: str
    status: int
    status_line: str
    bytes: int
    duration_ms: float
    user_agent: str = ""

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client} "{self.method} {self.path} {self.version}" '
            f'- {self.status_line} ({self.duration_ms:.2f}ms) "{self.user_agent or "-"}"'
        )


class AccessLogger:
    """
    Emits RequestLog entries in the configured format.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(RequestLog(...))
    """

    def __init__(self, log_format: str = "text"):
        self.log_format = log_format

    def log(self, entry: RequestLog):
        if self.log_format == "json":
            logger.info(json.dumps(entry.to_dict()))
        else:
            logger.info(entry.to_text())
