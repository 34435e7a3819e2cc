"""
=============================================================================
FILE SERVER - Main Server Class
=============================================================================

Ties the pieces together: listening socket, per-connection tasks, the
request dispatcher and the access log.

=============================================================================
CONCURRENCY MODEL
=============================================================================

A single thread runs an asyncio event loop. Every accepted connection
becomes its own task:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         EVENT LOOP                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   listener ──accept──► task(conn 1) ── read ── dispatch ── send     │
    │      │                                                               │
    │      ├─────accept──► task(conn 2) ── read ── dispatch ── send       │
    │      │                                   │                           │
    │      │                                   └─ waits on disk I/O in a   │
    │      │                                      worker thread; conn 1    │
    │      │                                      and 3 keep running       │
    │      └─────accept──► task(conn 3) ── ...                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No state is shared between connections except the read-only
configuration. The number of in-flight connections is unbounded unless
``max_connections`` is set.

=============================================================================
REQUEST FLOW
=============================================================================

    1. Read one chunk from the socket (empty → client left, just close)
    2. Parse the request line
    3. Dispatch: redirect / guard / exists / stat / read or list
    4. The dispatcher sends exactly one response and closes the socket
    5. Write the access log record

If step 3 raises, the error is logged and, when nothing was written yet,
a 500 is sent. The connection is always closed. A failing request never
takes the server down.

=============================================================================
"""

import asyncio
import logging
import signal
import time
from typing import Optional, Set

from .access_log import RequestLog, log_request, utc_timestamp
from .config import ServerConfig
from .core.connection import Connection
from .handlers.static import RequestDispatcher
from .http.request import HTTPRequest, RequestParser
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class FileServer:
    """
    Asynchronous static file server.

    Usage:
        config = ServerConfig(root_directory="/srv/www", port=3000)
        FileServer(config).run()          # blocks until Ctrl+C

    Or inside an existing event loop:
        server = FileServer(config)
        await server.start()
        host, port = server.address
        ...
        await server.stop()
    """

    SHUTDOWN_GRACE = 5.0  # seconds in-flight connections get to finish

    def __init__(
        self,
        config: ServerConfig,
        dispatcher: Optional[RequestDispatcher] = None,
    ):
        config.validate()
        self.config = config
        self.dispatcher = dispatcher or RequestDispatcher.from_config(config)
        self._parser = RequestParser()

        self._server: Optional[asyncio.AbstractServer] = None
        self._connections: Set[asyncio.Task] = set()
        self._slots: Optional[asyncio.Semaphore] = None
        self._stopped: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port). Resolves port 0 to the real port once started."""
        if self._server is not None and self._server.sockets:
            sockname = self._server.sockets[0].getsockname()
            return (sockname[0], sockname[1])
        return (self.config.host, self.config.port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self) -> None:
        """Configure logging and serve until interrupted. Blocks."""
        self._setup_logging()
        try:
            asyncio.run(self._run_forever())
        except KeyboardInterrupt:
            pass
        logger.info("Server stopped")

    async def start(self) -> None:
        """Bind the listening socket and start accepting connections."""
        if self.config.max_connections is not None:
            self._slots = asyncio.Semaphore(self.config.max_connections)
        self._stopped = asyncio.Event()

        try:
            self._server = await asyncio.start_server(
                self._handle_connection, self.config.host, self.config.port
            )
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise

        host, port = self.address
        logger.info(f"Serving {self.config.root_directory} on http://{host}:{port}")
        if len(self.dispatcher.redirects):
            logger.info(f"{len(self.dispatcher.redirects)} redirect(s) configured")

    async def serve_forever(self) -> None:
        """Wait until ``stop`` is called."""
        if self._server is None:
            await self.start()
        await self._stopped.wait()

    async def stop(self) -> None:
        """Stop accepting and wait for in-flight connections to finish."""
        if self._server is None:
            return

        logger.info("Shutting down server...")
        server, self._server = self._server, None
        server.close()

        if self._connections:
            _, pending = await asyncio.wait(
                set(self._connections), timeout=self.SHUTDOWN_GRACE
            )
            for task in pending:
                task.cancel()
            if pending:
                logger.warning(f"Cancelled {len(pending)} connection(s) still open at shutdown")
                await asyncio.gather(*pending, return_exceptions=True)

        await server.wait_closed()
        self._stopped.set()

    async def _run_forever(self) -> None:
        await self.start()
        self._install_signal_handlers()
        try:
            await self.serve_forever()
        finally:
            await self.stop()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(
                    sig, lambda s=sig: self._on_signal(s)
                )
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no signal handler support;
                # Ctrl+C still arrives as KeyboardInterrupt there.
                pass

    def _on_signal(self, signum: int) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
        # _run_forever stops the server once serve_forever returns
        if self._stopped is not None:
            self._stopped.set()

    def _setup_logging(self) -> None:
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Entry point for each accepted connection (runs as its own task)."""
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)

        conn = Connection(
            reader=reader,
            writer=writer,
            buffer_size=self.config.buffer_size,
            read_timeout=self.config.read_timeout,
        )
        logger.debug(f"[{conn.id}] Accepted connection from {conn.client_ip}")

        try:
            if self._slots is None:
                await self._process_connection(conn)
            else:
                async with self._slots:
                    await self._process_connection(conn)
        finally:
            await conn.close()
            if task is not None:
                self._connections.discard(task)

    async def _process_connection(self, conn: Connection) -> None:
        """Read, parse and dispatch one request."""
        raw = await conn.read_request()
        if raw is None:
            return

        request = self._parser.parse(raw)
        ctx = self.dispatcher.new_context(request, conn)
        started = time.perf_counter()

        try:
            await self.dispatcher.run(ctx)
        except Exception as e:
            logger.exception(f"[{conn.id}] Error handling {request.method} {request.path}: {e}")
            await self._send_error(conn)
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            # The client saw whatever was sent before the failure
            if ctx.response.sent:
                status, body_length = ctx.status, ctx.body_length
            else:
                status, body_length = HTTPStatus.INTERNAL_SERVER_ERROR, 0
            self._log_access(conn, request, status, body_length, duration_ms)

    async def _send_error(self, conn: Connection) -> None:
        """
        Send a 500 unless the connection is already done.

        A response that was committed (or a socket that was closed) is
        never written to a second time.
        """
        if conn.is_closed:
            return
        response = HTTPResponse(conn, HTTPStatus.INTERNAL_SERVER_ERROR)
        response.set_header("Content-Type", "text/plain")
        await response.send()

    def _log_access(
        self,
        conn: Connection,
        request: HTTPRequest,
        status: int,
        body_length: int,
        duration_ms: float,
    ) -> None:
        log_request(
            RequestLog(
                connection_id=conn.id,
                client_ip=conn.client_ip,
                method=request.method,
                path=request.path,
                status_code=int(status),
                content_length=body_length,
                duration_ms=duration_ms,
                timestamp=utc_timestamp(),
            ),
            self.config.log_format,
        )
