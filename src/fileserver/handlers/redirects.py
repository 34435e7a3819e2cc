"""
Redirect table: exact-match lookup from request path to target location.

    {"/old": "/new", "/blog": "https://blog.example.com/"}

    GET /old      → 308, Location: /new
    GET /old/     → no match (exact string comparison only)
    GET /old?x=1  → no match (the path is opaque, query included)
"""

from typing import Mapping, Optional


class RedirectTable:
    """
    Immutable view of the configured redirect map.

    The source mapping is copied on construction, so changing the
    configuration dict afterwards has no effect on lookups.
    """

    def __init__(self, redirect_map: Optional[Mapping[str, str]] = None):
        self._targets = dict(redirect_map or {})

    def lookup(self, path: Optional[str]) -> Optional[str]:
        """Return the redirect target for ``path``, or None."""
        if path is None:
            return None
        return self._targets.get(path)

    def __len__(self) -> int:
        return len(self._targets)

    def __repr__(self) -> str:
        return f"RedirectTable({self._targets!r})"
