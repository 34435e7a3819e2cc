"""
=============================================================================
HANDLERS MODULE
=============================================================================

Turns a parsed request into exactly one response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Component          │ Responsibility                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RequestDispatcher  │ Runs the per-request state machine             │
    │ RedirectTable      │ Exact path → Location lookup (308)             │
    │ PathGuard          │ Root + path resolution, ".." rejection (403)   │
    │ render_listing     │ HTML index page for directories                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .static import DispatchState, RequestContext, RequestDispatcher
from .redirects import RedirectTable
from .paths import PathGuard
from .listing import DirectoryEntry, render_listing

__all__ = [
    "RequestDispatcher",
    "RequestContext",
    "DispatchState",
    "RedirectTable",
    "PathGuard",
    "DirectoryEntry",
    "render_listing",
]
