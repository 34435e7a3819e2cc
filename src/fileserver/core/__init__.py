"""
=============================================================================
CORE COMPONENTS
=============================================================================

Connection-level plumbing. The listening socket itself is owned by
``asyncio.start_server`` in ``fileserver.server``; each accepted stream
pair is wrapped in a ``Connection``:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Connection                                                         │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Reads the request bytes (single read, optional timeout)          │
    │  • Writes one response, then closes                                 │
    │  • Absorbs socket errors so they never cause a second write         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState

__all__ = [
    "Connection",       # Wrapper for one client stream pair
    "ConnectionState",  # Enum for connection lifecycle states
]
