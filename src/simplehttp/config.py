"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one immutable dataclass, created once at startup and
shared read-only by every component.

=============================================================================
WHERE VALUES COME FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   CLI flags (--port, --root)  ──┐                                    │
    │                                 ├──►  ServerConfig  ──►  HTTPServer  │
    │   Environment (SIMPLEHTTP_*)  ──┘     (frozen)                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

frozen=True means nobody can change the port or the document root while
the server is running; connection threads can read the config without
any locking.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size

    HTTP
    - document_root, server_name, max_request_size
    - read_timeout, write_timeout

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = ""
    """
    The IP address to bind to.
    - "" - All interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    buffer_size: int = 4096
    """
    Bytes requested per recv() call.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "./www"
    """
    Directory files are served from. Created at startup if missing.
    """

    server_name: str = "SimpleHTTP/1.0"
    """
    Value of the Server header and the footer of error pages.
    """

    max_request_size: int = 8192
    """
    Upper bound on request line + headers, in bytes. Larger requests get
    400 Bad Request.
    """

    read_timeout: float = 30.0
    """
    Seconds a connection has to deliver its request.
    """

    write_timeout: float = 30.0
    """
    Seconds a connection has to accept our response.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    DEBUG, INFO, WARNING, ERROR or CRITICAL.
    """

    log_format: str = "text"
    """
    Access log format: 'text' (one readable line) or 'json'.
    """

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for logging.basicConfig()."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SIMPLEHTTP_HOST        Bind address (default: all interfaces)
        SIMPLEHTTP_PORT        Port (default: 8080)
        SIMPLEHTTP_ROOT        Document root (default: ./www)
        SIMPLEHTTP_LOG_LEVEL   Logging level (default: INFO)
        SIMPLEHTTP_LOG_FORMAT  Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("SIMPLEHTTP_HOST", ""),
            port=int(os.getenv("SIMPLEHTTP_PORT", "8080")),
            document_root=os.getenv("SIMPLEHTTP_ROOT", "./www"),
            log_level=os.getenv("SIMPLEHTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("SIMPLEHTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_request_size < 256:
            raise ValueError("max_request_size must be >= 256")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.read_timeout <= 0 or self.write_timeout <= 0:
            raise ValueError("read_timeout and write_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format}")
