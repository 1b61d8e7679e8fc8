"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, and close. Every
accepted socket is wrapped in a Connection and handed to a callback; the
loop goes straight back to accept() without waiting for it.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    OS starts queueing incoming connections
    4. accept()    Returns a NEW socket for one client;
                   the listening socket keeps listening
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client 1  │         │ Client 2  │         │ Client 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
STOPPING THE ACCEPT LOOP
=============================================================================

accept() blocks. To stop the loop from another thread (or a signal
handler) we close the listening socket. Two details make that reliable:

- accept() runs with a 1 second timeout, so even if closing the socket
  does not wake a blocked accept() on this platform, the loop notices
  within a second.
- close() sets a flag first. When accept() then fails with OSError, the
  loop checks the flag: deliberate close → leave quietly; anything else
  → log it and keep accepting.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    bind()            Create socket, bind, listen                     │
    │        │             (OSError here is fatal for the process)         │
    │        ▼                                                             │
    │    serve_forever(handler)                                            │
    │        │                                                             │
    │        └──► while not closed:                                        │
    │                accept()        wait ≤ 1s for a connection            │
    │                Connection()    wrap client socket                    │
    │                handler(conn)   hand off, do not wait                 │
    │                                                                      │
    │    close()           Mark closed, shut down and close listener       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.bind()
        server.serve_forever(lambda conn: threading.Thread(...).start())
    """

    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server. Does not create the socket yet.

        Args:
            config: Server configuration (host, port, backlog, buffer size).
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._closed = threading.Event()
        self._lock = threading.RLock()
        self._bound_address: Optional[Tuple[str, int]] = None

    @property
    def is_closed(self) -> bool:
        """True once close() has been called."""
        return self._closed.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        With port 0 the OS picks a free port; this is how to find out
        which one.
        """
        if self._bound_address is None:
            return (self.config.host, self.config.port)
        return self._bound_address

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart immediately instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Periodic wake-ups so the loop can notice close()
        sock.settimeout(self.ACCEPT_POLL_INTERVAL)

        return sock

    def bind(self):
        """
        Create the socket, bind it, and start listening.

        Raises:
            OSError: Address in use, permission denied, bad port, ...
                     The caller treats this as fatal.
        """
        sock = self._create_socket()

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to listen on port {self.config.port}: {e}")
            sock.close()
            raise

        host, port = sock.getsockname()[:2]
        self._bound_address = (host, port)
        self._socket = sock
        self._closed.clear()

    def serve_forever(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until close() is called.

        Args:
            connection_handler: Called with each new Connection. Must not
                                block; the HTTP server starts a thread.
        """
        if self._socket is None:
            raise RuntimeError("serve_forever() called before bind()")

        listener = self._socket

        while not self._closed.is_set():
            try:
                client_socket, client_address = listener.accept()
            except socket.timeout:
                # Normal: lets us re-check the closed flag
                continue
            except OSError as e:
                if self._closed.is_set():
                    break
                logger.error(f"Error accepting connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                max_drain_bytes=self.config.max_request_size,
            )
            connection_handler(conn)

        logger.info("Socket server stopped")

    def close(self):
        """
        Close the listening socket.

        Can be called from any thread or from a signal handler, and more
        than once. Connections already accepted are not touched.
        """
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()

            sock = self._socket
            if sock is None:
                return

            try:
                # Wakes a thread blocked in accept() on Linux
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # Listening sockets may refuse shutdown on some platforms

            try:
                sock.close()
            except OSError:
                pass  # Already closed
