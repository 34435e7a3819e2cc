"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The file server answers with a deliberately small set of status codes.
Every response it can produce falls into one of five outcomes:

    ┌───────┬───────────────────────┬──────────────────────────────────────┐
    │ Code  │ Reason phrase         │ When                                 │
    ├───────┼───────────────────────┼──────────────────────────────────────┤
    │  200  │ OK                    │ File or directory listing served     │
    │  308  │ Permanent Redirect    │ Path is a key in the redirect map    │
    │  403  │ Forbidden             │ Resolved path contains ".."          │
    │  404  │ Page Not Found        │ Nothing at the resolved path         │
    │  500  │ Internal Server Error │ Reading or listing failed            │
    └───────┴───────────────────────┴──────────────────────────────────────┘

Note the 404 phrase: it is "Page Not Found", not the RFC's "Not Found".
Clients only look at the number, but the phrase is part of the observable
wire output and is kept as-is.

Any other numeric code is a programming error. ``HTTPStatus(418)`` raises
``ValueError``, so the response writer fails fast.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server, with their reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Page Not Found'
    """

    OK = 200                        # File bytes or listing page
    PERMANENT_REDIRECT = 308        # Redirect table hit, method preserved
    FORBIDDEN = 403                 # Traversal guard tripped
    NOT_FOUND = 404                 # Existence probe failed
    INTERNAL_SERVER_ERROR = 500     # Read/stat/list failure

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Page Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
