"""
=============================================================================
CORE MODULE - Low-Level Networking
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer   bind / listen / accept / close                       │
    │       │                                                              │
    │       ▼                                                              │
    │  Connection     one client socket: line reads, deadlines, sendall    │
    └─────────────────────────────────────────────────────────────────────┘

Nothing in here knows about HTTP. The http package parses and builds
messages; this package only moves bytes.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, LineTooLongError

__all__ = [
    "SocketServer",     # Listening socket and accept loop
    "Connection",       # Wrapper for one client socket
    "ConnectionState",  # Connection lifecycle states
    "LineTooLongError", # Raised when a line exceeds its byte budget
]
