"""
=============================================================================
SHUTDOWN COORDINATION
=============================================================================

Ctrl+C (SIGINT) or `kill` / `docker stop` (SIGTERM) end the server:

    signal ──► print "Shutting down server..."
           ──► close the listening socket   (accept loop exits)
           ──► print final statistics
           ──► exit with status 0

=============================================================================
WHAT THIS DOES NOT DO
=============================================================================

Requests already being handled are NOT waited for. Their threads are
daemon threads and die with the process, possibly mid-response. Shutdown
only stops new connections from being accepted and reports the numbers.

=============================================================================
SIGNALS IN PYTHON
=============================================================================

Python runs signal handlers in the main thread only, between bytecodes,
and only the main thread may install them. So:

- install() is a no-op (with a debug log) when called from another
  thread, e.g. a test running the server in the background. Those
  callers use HTTPServer.stop() instead.
- the handler runs in the same thread as the accept loop. It closes the
  listener and then raises SystemExit, which unwinds the loop.

=============================================================================
"""

import signal
import sys
import logging
import threading
from typing import Callable, Optional, TextIO

from .core.socket_server import SocketServer
from .stats import ServerStats


logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """
    Waits for SIGINT/SIGTERM and runs the shutdown sequence once.

    Usage:
        coordinator = ShutdownCoordinator(socket_server, stats)
        coordinator.install()
        try:
            socket_server.serve_forever(...)
        finally:
            coordinator.restore()
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(
        self,
        socket_server: SocketServer,
        stats: ServerStats,
        terminate: Callable[[int], None] = sys.exit,
        out: Optional[TextIO] = None,
    ):
        """
        Args:
            socket_server: Listener to close.
            stats: Counters to report.
            terminate: Called with the exit status at the end of the
                       sequence. sys.exit raises SystemExit.
            out: Where the report goes. Defaults to sys.stdout at the time
                 of shutdown.
        """
        self._socket_server = socket_server
        self._stats = stats
        self._terminate = terminate
        self._out = out

        # Reentrant: a second signal can interrupt the handler on the same thread
        self._lock = threading.RLock()
        self._triggered = False
        self._original_handlers: dict = {}

    @property
    def triggered(self) -> bool:
        return self._triggered

    def install(self) -> bool:
        """
        Install handlers for SIGINT and SIGTERM.

        Returns:
            True if installed, False when not on the main thread.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return False

        for sig in self.SIGNALS:
            self._original_handlers[sig] = signal.signal(sig, self._handle_signal)
        return True

    def restore(self):
        """Put back the handlers that were there before install()."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _handle_signal(self, signum, frame):
        signal_name = signal.Signals(signum).name
        logger.info(f"Received {signal_name}, initiating shutdown...")
        self.shutdown()

    def shutdown(self):
        """
        Run the shutdown sequence. Later calls do nothing.

        Ends by calling terminate(0); with the default sys.exit this
        raises SystemExit and does not return.
        """
        with self._lock:
            if self._triggered:
                return
            self._triggered = True

        out = self._out or sys.stdout

        print("\nShutting down server...", file=out)
        self._socket_server.close()

        print(self._stats.snapshot().format_report(), file=out)
        out.flush()

        self._terminate(0)
