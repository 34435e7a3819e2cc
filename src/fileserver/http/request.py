"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes received on a connection into an ``HTTPRequest``.

The file server only ever looks at the request line:

    GET /docs/notes.md HTTP/1.1\r\n       ← parsed
    Host: localhost:3000\r\n               ← ignored
    User-Agent: curl/8.5.0\r\n             ← ignored
    \r\n

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST LINE → HTTPRequest                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    "GET /docs/notes.md HTTP/1.1"                                    │
    │      │   │             │                                            │
    │      │   │             └── version  (kept for logging only)         │
    │      │   └──────────────── path     (opaque, never decoded)         │
    │      └──────────────────── method   (not validated here)            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No validation happens at this layer. A first line without a path yields
``path=None`` and the dispatcher decides what to do with it. Bytes are
decoded as UTF-8 with ``surrogateescape``: decoding never fails, and a
path with bytes that are not valid UTF-8 still encodes back to the exact
filesystem name through ``os.fsencode``.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request. Created once per connection, never mutated.

    Attributes:
        method: First token of the request line ("" for an empty buffer).
        path: Second token, or None when the line is too short.
        version: Third token, or None. Informational only.
    """

    method: str
    path: Optional[str]
    version: Optional[str] = None

    @property
    def has_path(self) -> bool:
        return self.path is not None


class RequestParser:
    """
    Parses raw request bytes.

    The parser is stateless; a single instance is shared by every
    connection handled by the server.
    """

    ENCODING = "utf-8"
    ERRORS = "surrogateescape"

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse the first line of ``data`` into an HTTPRequest.

        Args:
            data: Bytes received on the connection (may be partial).

        Returns:
            HTTPRequest with method and path taken from the first two
            whitespace-separated tokens.
        """
        text = data.decode(self.ENCODING, self.ERRORS)
        first_line = text.split("\n", 1)[0]
        tokens = first_line.split()

        method = tokens[0] if tokens else ""
        path = tokens[1] if len(tokens) > 1 else None
        version = tokens[2] if len(tokens) > 2 else None

        return HTTPRequest(method=method, path=path, version=version)


_default_parser = RequestParser()


def parse_request(data: bytes) -> HTTPRequest:
    """Parse request bytes with the module-level parser."""
    return _default_parser.parse(data)
