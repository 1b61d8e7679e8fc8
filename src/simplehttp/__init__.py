"""
=============================================================================
SIMPLEHTTP - Static File Server Built From Raw Sockets
=============================================================================

A small HTTP/1.1 server that serves files from one directory. No
framework, no http.server: a TCP listener, a line-oriented request parser,
and responses written byte by byte.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    SIMPLEHTTP ARCHITECTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                         │
    │      - TCP listener, accept loop, one thread per connection         │
    │      - Buffered line reads with size limits and deadlines           │
    │                                                                      │
    │   2. HTTP/1.1 (THE SMALL PART OF IT)                                │
    │      - Request line and headers, no bodies                          │
    │      - GET only, one request per connection                         │
    │                                                                      │
    │   3. STATIC FILES                                                   │
    │      - "/" maps to index.html, MIME type from the extension         │
    │      - Traversal guard: ".." and "~" never reach the filesystem     │
    │                                                                      │
    │   4. OPERATIONS                                                     │
    │      - Thread-safe request statistics                               │
    │      - Report printed on SIGINT / SIGTERM                           │
    │      - Access log in text or JSON                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    simplehttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m simplehttp)
    ├── server.py            # HTTPServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── stats.py             # Request counters and the shutdown report
    ├── shutdown.py          # SIGINT / SIGTERM handling
    ├── access_log.py        # One log line per request
    ├── sample_site.py       # --setup: writes a demo website
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building and serialization
    │   ├── status_codes.py  # HTTP status enum
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # Path resolution and file serving

=============================================================================
QUICK START
=============================================================================

    from simplehttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080, document_root="./www"))
    server.start()

or from the shell:

    python -m simplehttp --setup      # write a sample site into ./www
    python -m simplehttp -p 8080

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
