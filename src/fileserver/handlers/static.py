"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Serves one request: redirect, file, rendered markdown or directory
listing. Every request produces exactly one terminal response.

=============================================================================
STATE MACHINE
=============================================================================

Each request carries a ``RequestContext`` through a fixed sequence of
states. A state either sends the terminal response (and moves to DONE)
or hands over to the next one. No state is ever revisited.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   REDIRECT ── path in redirect map ──────────────────► 308  ──┐     │
    │      │                                                         │     │
    │      ▼                                                         │     │
    │   GUARD ───── no path ───────────────────────────────► 404  ──┤     │
    │      │  ───── ".." in full path ─────────────────────► 403  ──┤     │
    │      ▼                                                         │     │
    │   EXISTS ──── nothing on disk ───────────────────────► 404  ──┤     │
    │      │                                                         │     │
    │      ▼                                                         │     │
    │   STAT ────── stat failed ───────────────────────────► 500  ──┤     │
    │      │                                                         │     │
    │      ├── regular file ──► READ_FILE ─── error ───────► 500  ──┤     │
    │      │                        └──────── ok ──────────► 200  ──┤     │
    │      │                                                         │     │
    │      └── anything else ─► LIST_DIRECTORY ─ error ────► 500  ──┤     │
    │                               └────────── ok ────────► 200  ──┤     │
    │                                                                ▼     │
    │                                                              DONE    │
    └─────────────────────────────────────────────────────────────────────┘

The filesystem calls of EXISTS, STAT, READ_FILE and LIST_DIRECTORY run in
worker threads (``asyncio.to_thread``), so a slow disk suspends only the
request that is waiting on it.

=============================================================================
CONTENT TYPES
=============================================================================

Files are sent with the type from ``mime_types``. Markdown files are
rendered to HTML first, but their Content-Type is still looked up from
the ".md" extension, which has no table entry. The header is therefore
left unset and the response writer's ``text/html`` default applies.

=============================================================================
"""

import asyncio
import logging
import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Mapping, Optional

from ..http.mime_types import get_extension, get_mime_type
from ..http.request import HTTPRequest
from ..http.response import Body, HTTPResponse, encode_body
from ..http.status_codes import HTTPStatus
from ..markdown import render as render_markdown
from .listing import DirectoryEntry, render_listing
from .paths import PathGuard
from .redirects import RedirectTable

if TYPE_CHECKING:
    from ..config import ServerConfig
    from ..core.connection import Connection


logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = "md"
NOT_FOUND_BODY = "Page Not Found"


class DispatchState(Enum):
    """Steps of request handling, in the order they run."""
    REDIRECT = "redirect"
    GUARD = "guard"
    EXISTS = "exists"
    STAT = "stat"
    READ_FILE = "read_file"
    LIST_DIRECTORY = "list_directory"
    DONE = "done"


@dataclass
class RequestContext:
    """
    Per-request state threaded through the dispatcher steps.

    Attributes:
        request: The parsed request.
        response: The response that will carry the terminal answer.
        state: The step that runs next.
        full_path: Root directory + request path, set by GUARD.
        visited: Every state entered, in order.
        body_length: Number of body bytes sent.
    """

    request: HTTPRequest
    response: HTTPResponse
    state: DispatchState = DispatchState.REDIRECT
    full_path: Optional[str] = None
    visited: List[DispatchState] = field(default_factory=list)
    body_length: int = 0

    @property
    def status(self) -> HTTPStatus:
        return self.response.status_code


Step = Callable[[RequestContext], Awaitable[DispatchState]]


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _scan_directory(path: str) -> List[DirectoryEntry]:
    with os.scandir(path) as entries:
        return [DirectoryEntry(entry.name, entry.is_dir()) for entry in entries]


class RequestDispatcher:
    """
    Resolves requests against the document root and redirect table.

    Usage:
        dispatcher = RequestDispatcher("/srv/www", {"/old": "/new"})
        ctx = await dispatcher.dispatch(request, connection)
        ctx.status   # HTTPStatus of the response that was sent

    Args:
        root_directory: Absolute document root.
        redirect_map: Exact-match redirects, request path → Location.
        strict_paths: Also reject paths whose real path leaves the root.
        markdown_renderer: Function turning markdown text into HTML.
    """

    def __init__(
        self,
        root_directory: str,
        redirect_map: Optional[Mapping[str, str]] = None,
        strict_paths: bool = False,
        markdown_renderer: Callable[[str], str] = render_markdown,
    ):
        self.guard = PathGuard(root_directory, strict=strict_paths)
        self.redirects = RedirectTable(redirect_map)
        self.render_markdown = markdown_renderer

        self._steps: Dict[DispatchState, Step] = {
            DispatchState.REDIRECT: self._check_redirect,
            DispatchState.GUARD: self._check_guard,
            DispatchState.EXISTS: self._check_exists,
            DispatchState.STAT: self._stat_path,
            DispatchState.READ_FILE: self._serve_file,
            DispatchState.LIST_DIRECTORY: self._serve_directory,
        }

    @classmethod
    def from_config(cls, config: "ServerConfig") -> "RequestDispatcher":
        return cls(
            config.root_directory,
            config.redirect_map,
            strict_paths=config.strict_paths,
        )

    @property
    def root_directory(self) -> str:
        return self.guard.root_directory

    def new_context(
        self, request: HTTPRequest, connection: "Connection"
    ) -> RequestContext:
        """Create the context for a request, positioned at the first step."""
        return RequestContext(request=request, response=HTTPResponse(connection))

    async def dispatch(
        self, request: HTTPRequest, connection: "Connection"
    ) -> RequestContext:
        """
        Run the state machine for one request.

        Returns:
            The finished context; ``ctx.response`` has been sent.
        """
        return await self.run(self.new_context(request, connection))

    async def run(self, ctx: RequestContext) -> RequestContext:
        """
        Advance ``ctx`` until a terminal response has been sent.

        Filesystem errors are turned into responses inside the steps.
        Anything else (a bug, a failing markdown renderer) propagates to
        the caller, which keeps ``ctx`` and can tell from
        ``ctx.response.sent`` whether the client already got an answer.
        """
        while ctx.state is not DispatchState.DONE:
            ctx.visited.append(ctx.state)
            step = self._steps[ctx.state]
            ctx.state = await step(ctx)

        return ctx

    # =========================================================================
    # TERMINAL RESPONSE
    # =========================================================================

    async def _finish(
        self,
        ctx: RequestContext,
        status: HTTPStatus,
        content_type: Optional[str] = None,
        body: Body = None,
    ) -> DispatchState:
        ctx.response.status(status)
        ctx.response.set_header("Content-Type", content_type)
        ctx.body_length = len(encode_body(body))
        await ctx.response.send(body)
        return DispatchState.DONE

    # =========================================================================
    # STEPS
    # =========================================================================

    async def _check_redirect(self, ctx: RequestContext) -> DispatchState:
        target = self.redirects.lookup(ctx.request.path)
        if target is None:
            return DispatchState.GUARD

        logger.debug(f"Redirecting {ctx.request.path} -> {target}")
        ctx.response.set_header("Location", target)
        return await self._finish(ctx, HTTPStatus.PERMANENT_REDIRECT, "text/html")

    async def _check_guard(self, ctx: RequestContext) -> DispatchState:
        if not ctx.request.has_path:
            # Nothing to resolve; answer without touching the filesystem.
            logger.debug("Request line without a path")
            return await self._finish(
                ctx, HTTPStatus.NOT_FOUND, "text/plain", NOT_FOUND_BODY
            )

        ctx.full_path = self.guard.resolve(ctx.request.path)

        if await asyncio.to_thread(self.guard.is_forbidden, ctx.full_path):
            return await self._finish(ctx, HTTPStatus.FORBIDDEN, "text/plain")

        return DispatchState.EXISTS

    async def _check_exists(self, ctx: RequestContext) -> DispatchState:
        exists = await asyncio.to_thread(os.path.exists, ctx.full_path)
        if not exists:
            return await self._finish(
                ctx, HTTPStatus.NOT_FOUND, "text/plain", NOT_FOUND_BODY
            )
        return DispatchState.STAT

    async def _stat_path(self, ctx: RequestContext) -> DispatchState:
        try:
            stat_result = await asyncio.to_thread(os.stat, ctx.full_path)
        except OSError as e:
            # Removed between the existence probe and now
            logger.error(f"Cannot stat {ctx.full_path}: {e}")
            return await self._finish(
                ctx, HTTPStatus.INTERNAL_SERVER_ERROR, "text/plain"
            )

        if stat.S_ISREG(stat_result.st_mode):
            return DispatchState.READ_FILE
        return DispatchState.LIST_DIRECTORY

    async def _serve_file(self, ctx: RequestContext) -> DispatchState:
        try:
            data = await asyncio.to_thread(_read_file, ctx.full_path)
        except OSError as e:
            logger.error(f"Cannot read {ctx.full_path}: {e}")
            return await self._finish(
                ctx, HTTPStatus.INTERNAL_SERVER_ERROR, "text/plain"
            )

        content_type = get_mime_type(ctx.full_path)

        if get_extension(ctx.request.path) == MARKDOWN_EXTENSION:
            html = self.render_markdown(data.decode("utf-8", errors="replace"))
            return await self._finish(ctx, HTTPStatus.OK, content_type, html)

        return await self._finish(ctx, HTTPStatus.OK, content_type, data)

    async def _serve_directory(self, ctx: RequestContext) -> DispatchState:
        try:
            entries = await asyncio.to_thread(_scan_directory, ctx.full_path)
        except OSError as e:
            logger.error(f"Cannot list {ctx.full_path}: {e}")
            return await self._finish(
                ctx, HTTPStatus.INTERNAL_SERVER_ERROR, "text/plain"
            )

        page = render_listing(ctx.request.path, entries)
        return await self._finish(ctx, HTTPStatus.OK, "text/html", page)
