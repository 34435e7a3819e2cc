"""
=============================================================================
FILESERVER - Static File Server Over Raw Sockets
=============================================================================

Accepts TCP connections, reads the HTTP request line, and answers with a
redirect, a file, a rendered markdown page or a directory listing from a
configured document root.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        REQUEST PIPELINE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   bytes ──► RequestParser ──► RequestDispatcher ──► HTTPResponse    │
    │                                  │                                   │
    │                                  ├─ RedirectTable    (308)           │
    │                                  ├─ PathGuard        (403)           │
    │                                  ├─ filesystem       (404 / 500)     │
    │                                  ├─ mime_types + markdown (200)      │
    │                                  └─ listing          (200)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserver)
    ├── server.py            # FileServer: asyncio listener + connection tasks
    ├── config.py            # ServerConfig dataclass, JSON/env loading
    ├── access_log.py        # Access log records
    ├── markdown.py          # Markdown → HTML (markdown-it-py)
    ├── core/
    │   └── connection.py    # Per-connection stream wrapper
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response writer
    │   ├── status_codes.py  # The five status codes in use
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        ├── static.py        # RequestDispatcher state machine
        ├── paths.py         # Document root resolution + traversal guard
        ├── redirects.py     # Exact-match redirect table
        └── listing.py       # Directory listing page

=============================================================================
QUICK START
=============================================================================

    from fileserver import FileServer, ServerConfig

    config = ServerConfig(
        root_directory="/srv/www",
        redirect_map={"/old": "/new"},
    )
    FileServer(config).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ConfigError, ServerConfig
from .server import FileServer

__all__ = ["FileServer", "ServerConfig", "ConfigError", "__version__"]
