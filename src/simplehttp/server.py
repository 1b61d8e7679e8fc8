"""
=============================================================================
STATIC HTTP SERVER
=============================================================================

The orchestrator that ties the components together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ── accept() ──► Connection ──► new Thread             │
    │        ▲                                          │                  │
    │        │ close()                                  ▼                  │
    │   ShutdownCoordinator               _handle_connection(conn)         │
    │   (SIGINT / SIGTERM)                      │                          │
    │        │                                  ├─► RequestParser          │
    │        └── ServerStats ◄──────────────────┤                          │
    │            (report)       record_*()      ├─► StaticFileHandler      │
    │                                           │     ├─ PathResolver      │
    │                                           │     └─ get_mime_type     │
    │                                           ├─► HTTPResponse.to_bytes  │
    │                                           ├─► Connection.send        │
    │                                           └─► AccessLogger           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONCURRENCY MODEL
=============================================================================

One thread per accepted connection, no pool and no limit. The accept loop
never waits for a handler; it starts the thread and goes back to
accept(). The only state the threads share is ServerStats, which locks.
Everything else (the connection, the request, the response) belongs to
one thread.

=============================================================================
"""

import logging
import threading
import time
from pathlib import Path
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .http import HTTPRequest, RequestParser, HTTPParseError, HTTPResponse, bad_request
from .handlers import StaticFileHandler
from .stats import ServerStats
from .shutdown import ShutdownCoordinator
from .access_log import AccessLogger, RequestLog


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 static file server.

    =========================================================================
    FEATURES
    =========================================================================

    - GET only, one request per connection (Connection: close)
    - Files served from a document root, "/" maps to index.html
    - Path traversal guard (".." and "~" are rejected)
    - Per-connection read/write deadlines
    - Thread-safe request statistics, printed on shutdown

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8080, document_root="./www"))
        server.start()      # Blocks until SIGINT/SIGTERM

    Embedded (tests, other threads):

        server = HTTPServer(ServerConfig(host="127.0.0.1", port=0))
        server.bind()
        threading.Thread(target=server.serve_forever, daemon=True).start()
        ...
        server.stop()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server. Nothing is bound yet.

        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.stats = ServerStats()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._handler = StaticFileHandler(
            self.config.document_root,
            server_name=self.config.server_name,
        )
        self._access_log = AccessLogger(log_format=self.config.log_format)
        self._shutdown = ShutdownCoordinator(self._socket_server, self.stats)

    @property
    def address(self) -> tuple:
        """Bound (host, port); meaningful after bind()."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        """
        Bind and serve until shutdown (blocking).

        Raises:
            OSError: If the listening socket cannot be bound. This is the
                     only startup failure that stops the server.
        """
        self.bind()
        self.serve_forever()

    def bind(self):
        """
        Bind the listener and prepare the document root.

        Raises:
            OSError: If binding fails.
        """
        self._socket_server.bind()

        _, port = self.address
        logger.info(f"SimpleHTTP Server started on port {port}")
        logger.info(f"Document root: {self.config.document_root}")
        logger.info("Press Ctrl+C to stop")

        self._ensure_document_root()

    def serve_forever(self):
        """Run the accept loop; signal handlers are active while it runs."""
        self._shutdown.install()
        try:
            self._socket_server.serve_forever(self._dispatch)
        finally:
            self._shutdown.restore()

    def stop(self):
        """
        Stop accepting connections.

        In-flight connections are not waited for.
        """
        self._socket_server.close()

    def _ensure_document_root(self):
        """
        Create the document root if it is missing.

        Best effort: a failure is logged and the server keeps running;
        every request will simply get 404.
        """
        try:
            Path(self.config.document_root).mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create document root {self.config.document_root}: {e}")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _dispatch(self, conn: Connection):
        """Start a handler thread for a new connection and return at once."""
        thread = threading.Thread(
            target=self._handle_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _handle_connection(self, conn: Connection):
        """
        Handle one connection from accept to close (runs in its own thread).

        =====================================================================
        STATE MACHINE
        =====================================================================

            ACCEPTED ─► PARSING ─┬─► BUILDING ─► SENDING ─┬─► CLOSED
                                 │                        │
                     parse error │            send error  │
                     400, error++└───────► CLOSED ◄───────┘ error++

        1. Fix read/write deadlines.
        2. Parse. On failure: send 400, error++, log, close.
           The total counter is NOT incremented.
        3. total++, build the response, serialize, send.
        4. Send failed: error++, log, close.
        5. Sent: 200 → success++, anything else → error++; then the
           access log line; close.

        The counter update for a request always happens before its log
        line.

        =====================================================================

        Args:
            conn: The client connection.
        """
        with conn:
            try:
                self._process(conn)
            except Exception:
                # Nothing may escape a connection thread
                logger.exception(f"[{conn.id}] Unexpected error handling connection")

    def _process(self, conn: Connection):
        started = time.perf_counter()

        conn.set_deadlines(self.config.read_timeout, self.config.write_timeout)
        logger.debug(f"[{conn.id}] Connection from {conn.remote}")

        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        conn.state = ConnectionState.PARSING
        try:
            request = self._parser.parse(conn, conn.address)
        except HTTPParseError as e:
            self._send_bad_request(conn)
            self.stats.record_error()
            logger.warning(f"[{conn.id}] Error parsing request from {conn.remote}: {e}")
            return

        self.stats.record_request()

        # ─────────────────────────────────────────────────────────────────
        # BUILD
        # ─────────────────────────────────────────────────────────────────
        conn.state = ConnectionState.BUILDING
        response = self._handler.handle(request)

        # ─────────────────────────────────────────────────────────────────
        # SEND
        # ─────────────────────────────────────────────────────────────────
        try:
            conn.send_response(response.to_bytes(self.config.server_name))
        except OSError as e:
            self.stats.record_error()
            logger.warning(f"[{conn.id}] Error sending response to {conn.remote}: {e}")
            return

        if response.is_ok:
            self.stats.record_success()
        else:
            self.stats.record_error()

        self._log_request(request, response, started)

    def _send_bad_request(self, conn: Connection):
        """Best-effort 400; the peer may already be gone."""
        response = bad_request(self.config.server_name)
        try:
            conn.send_response(response.to_bytes(self.config.server_name))
        except OSError as e:
            logger.debug(f"[{conn.id}] Could not send 400 to {conn.remote}: {e}")

    def _log_request(self, request: HTTPRequest, response: HTTPResponse, started: float):
        self._access_log.log(RequestLog(
            client=request.remote,
            method=request.method,
            path=request.path,
            version=request.version,
            status=int(response.status),
            status_line=response.status.line,
            bytes=len(response.body),
            duration_ms=(time.perf_counter() - started) * 1000,
            user_agent=request.user_agent,
        ))
