"""
=============================================================================
PATH RESOLVER & TRAVERSAL GUARD
=============================================================================

Maps a request path onto the filesystem and decides whether the server
may touch the result.

=============================================================================
RESOLUTION
=============================================================================

The full path is the root directory and the request path glued together
as strings. No normalization, no joining rules:

    root = "/srv/www"      path = "/docs/a.txt"   →  "/srv/www/docs/a.txt"
    root = "/srv/www"      path = "/../etc/passwd" → "/srv/www/../etc/passwd"

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../etc/passwd HTTP/1.1                                        │
    │                                                                      │
    │  full path: /srv/www/../etc/passwd                                  │
    │                     ──                                              │
    │                     └── contains ".." → 403 Forbidden               │
    │                                                                      │
    │  The check runs before ANY filesystem call, so a rejected path is   │
    │  never even probed for existence.                                   │
    └─────────────────────────────────────────────────────────────────────┘

The default check is textual. It blocks the literal ".." token anywhere
in the full path (which also rejects harmless names such as "a..b.txt"),
but it does not follow symlinks or decode "%2e%2e". Nor does it catch a
request path without a leading slash, which concatenates into a sibling
of the root:

    root = "/srv/www"      path = "x/secret"      → "/srv/wwwx/secret"

``strict=True`` adds a canonical containment check on top:

    full_path.realpath()  must be  root.realpath()  or below it

which also stops symlinks that point outside the document root and the
sibling-directory case above. The literal ".." rule behaves identically
in both modes.

=============================================================================
"""

import logging
import os
from typing import Optional


logger = logging.getLogger(__name__)

TRAVERSAL_TOKEN = ".."


class PathGuard:
    """
    Resolves request paths against the document root and rejects escapes.

    Args:
        root_directory: Absolute path of the document root.
        strict: Also require the canonical path to stay inside the root.
    """

    def __init__(self, root_directory: str, strict: bool = False):
        self.root_directory = root_directory
        self.strict = strict
        self._canonical_root = os.path.realpath(root_directory)

    def resolve(self, request_path: str) -> str:
        """Concatenate the document root and the request path."""
        return self.root_directory + request_path

    def is_forbidden(self, full_path: Optional[str]) -> bool:
        """
        Check a resolved path against the traversal rules.

        This is pure string work in the default mode; with ``strict`` it
        also canonicalizes the path, which reads symlinks but never opens
        the target.

        Returns:
            True if the request must be answered with 403.
        """
        if full_path is None:
            return False
        if self.is_traversal(full_path):
            return True
        return self.strict and self.escapes_root(full_path)

    def is_traversal(self, full_path: str) -> bool:
        """Textual check: does the path contain the ".." token anywhere?"""
        if TRAVERSAL_TOKEN in full_path:
            logger.warning(f"Path traversal attempt blocked: {full_path}")
            return True
        return False

    def escapes_root(self, full_path: str) -> bool:
        """Canonical check: does the real path leave the document root?"""
        canonical = os.path.realpath(full_path)
        if canonical == self._canonical_root:
            return False
        root_prefix = self._canonical_root.rstrip(os.sep) + os.sep
        if canonical.startswith(root_prefix):
            return False
        logger.warning(f"Path escapes document root: {full_path} -> {canonical}")
        return True
