"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds a response and writes it onto the client connection.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 308 Permanent Redirect\r\n    ← status line             │
    │    Location: /new\r\n                     ← headers, in the order   │
    │    Content-Type: text/html\r\n              they were first set     │
    │    \r\n                                   ← blank line              │
    │    <body bytes>                           ← may be empty            │
    │                                                                      │
    │    (connection closed - the close delimits the body)                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing else is added: no Content-Length, no Date, no Server header.
The one header guaranteed on every response is Content-Type, which
defaults to ``text/html`` when the caller never set one.

=============================================================================
LIFECYCLE
=============================================================================

``HTTPResponse`` is a mutable builder bound to one connection:

    response = HTTPResponse(conn)
    response.status(404)                 # any number of times
    response.set_header("Content-Type", "text/plain")
    await response.send("Page Not Found")  # exactly once, terminal

``send`` is the only path by which bytes reach the client. It closes the
connection afterwards, and a second call raises
``ResponseAlreadySentError`` without touching the socket.

=============================================================================
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional, Union

from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from ..core.connection import Connection


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "text/html"

Body = Union[bytes, str, None]


class ResponseAlreadySentError(RuntimeError):
    """Raised when ``send`` is called on a response that was already sent."""


def encode_body(body: Body) -> bytes:
    """
    Normalize a body to bytes. Strings are UTF-8 encoded, None is empty.

    Lone surrogates (file names that were not valid UTF-8 on disk) are
    written back as their original bytes.
    """
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8", "surrogateescape")
    return bytes(body)


def format_response(
    version: str,
    status: HTTPStatus,
    headers: Dict[str, str],
    body: Body = None,
) -> bytes:
    """
    Serialize a response to wire bytes.

    Args:
        version: Protocol version for the status line ("HTTP/1.1").
        status: Status code; its phrase comes from the fixed table.
        headers: Header mapping, written in iteration order.
        body: Response body.

    Returns:
        Status line, header lines, blank line and body as one bytes object.
    """
    lines = [f"{version} {int(status)} {status.phrase}"]
    for name, value in headers.items():
        lines.append(f"{name}: {value}")

    # Header values can carry arbitrary file names (Location targets);
    # UTF-8 keeps them intact instead of failing on non-Latin-1 characters.
    head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8", "surrogateescape")
    return head + encode_body(body)


class HTTPResponse:
    """
    A single HTTP response, bound to the connection it will be written to.

    Attributes:
        status_code: Current status (HTTPStatus member).
        version: Protocol version written on the status line.
        headers: Header mapping; insertion order is the wire order.
        body: Body passed to ``send`` (None until sent).
    """

    def __init__(
        self,
        connection: "Connection",
        status: int = HTTPStatus.OK,
        version: str = "HTTP/1.1",
    ):
        self.connection = connection
        self.status_code = HTTPStatus(status)
        self.version = version
        self.headers: Dict[str, str] = {}
        self.body: Body = None
        self._sent = False

    @property
    def sent(self) -> bool:
        return self._sent

    def status(self, code: int) -> "HTTPResponse":
        """
        Set the status code.

        Raises:
            ValueError: If ``code`` is not one of the server's known codes.
        """
        self.status_code = HTTPStatus(code)
        return self

    def set_header(self, name: str, value: Optional[str]) -> "HTTPResponse":
        """
        Set (or overwrite) a header.

        A ``None`` value removes the header instead. This is how an
        unmapped MIME type ends up with the default Content-Type.
        """
        if value is None:
            self.headers.pop(name, None)
        else:
            self.headers[name] = value
        return self

    async def send(self, body: Body = None) -> None:
        """
        Write the response and close the connection.

        Args:
            body: Response body; str is UTF-8 encoded, None sends no body.

        Raises:
            ResponseAlreadySentError: If the response was already sent.
        """
        if self._sent:
            raise ResponseAlreadySentError(
                f"response {int(self.status_code)} already sent"
            )
        self._sent = True

        self.body = body
        self.headers.setdefault("Content-Type", DEFAULT_CONTENT_TYPE)

        payload = format_response(self.version, self.status_code, self.headers, body)
        await self.connection.send_and_close(payload)
