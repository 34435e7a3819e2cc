"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The subset of HTTP/1.1 the file server speaks:

    REQUEST (consumed):               RESPONSE (produced):
    ───────────────────               ────────────────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    (everything else ignored)         Content-Type: text/html\r\n
                                      \r\n
                                      [body]
                                      (connection closed)

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest(method, path)                  │
    │ response.py      HTTPResponse builder, wire serialization           │
    │ status_codes.py  200 / 308 / 403 / 404 / 500 and their phrases      │
    │ mime_types.py    extension → Content-Type                           │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseAlreadySentError,
    format_response,
    DEFAULT_CONTENT_TYPE,
)
from .status_codes import HTTPStatus
from .mime_types import MIME_TYPES, get_extension, get_mime_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response writing
    "HTTPResponse",
    "ResponseAlreadySentError",
    "format_response",
    "DEFAULT_CONTENT_TYPE",

    # Status codes
    "HTTPStatus",

    # MIME types
    "MIME_TYPES",
    "get_extension",
    "get_mime_type",
]
