"""
=============================================================================
CONNECTION - Client Connection Wrapper
=============================================================================

Wraps the asyncio stream pair of one accepted TCP connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONNECTION LIFECYCLE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED             │
    │              │                                     ▲                 │
    │              └──── empty read / timeout / error ───┘                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: one request is read, one response is written,
and the connection is closed. Because of that the wrapper reads a single
chunk and never buffers across requests.

Socket errors raised while writing (client reset, broken pipe) are
absorbed here. The response has already been committed at that point, so
the only sensible outcome is closing the socket. Nothing ever tries to
send a second response on a connection that failed mid-write.

=============================================================================
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close bookkeeping."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        reader: Stream the request bytes arrive on.
        writer: Stream the response is written to.
        id: Short identifier used as a log prefix.
        state: Current lifecycle state.
        created_at: Accept timestamp.
        buffer_size: Maximum bytes read for the request.
        read_timeout: Seconds to wait for request bytes (None waits forever).
    """

    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    read_timeout: Optional[float] = None

    @property
    def address(self) -> tuple[str, int]:
        """The client's (ip, port), or ("", 0) when unknown."""
        peer = self.writer.get_extra_info("peername")
        if not peer:
            return ("", 0)
        return (peer[0], peer[1])

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def is_closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    async def read_request(self) -> Optional[bytes]:
        """
        Read the request bytes.

        A single read is enough: only the request line is ever used, and
        it arrives in the first segment for any real client.

        Returns:
            The bytes read, or None if the client closed the connection,
            the read timed out, or the socket failed.
        """
        self.state = ConnectionState.READING
        try:
            if self.read_timeout is None:
                data = await self.reader.read(self.buffer_size)
            else:
                data = await asyncio.wait_for(
                    self.reader.read(self.buffer_size), self.read_timeout
                )
        except asyncio.TimeoutError:
            logger.debug(f"[{self.id}] Read timeout after {self.read_timeout}s")
            return None
        except (ConnectionError, OSError) as e:
            logger.debug(f"[{self.id}] Read failed: {e}")
            return None

        if not data:
            logger.debug(f"[{self.id}] Client closed before sending a request")
            return None

        self.state = ConnectionState.PROCESSING
        return data

    async def send_and_close(self, data: bytes) -> bool:
        """
        Write ``data`` and close the connection.

        Returns:
            True if the bytes were flushed, False if the socket failed or
            the connection was already closed.
        """
        if self.is_closed:
            logger.debug(f"[{self.id}] Write on closed connection dropped")
            return False

        self.state = ConnectionState.WRITING
        ok = True
        try:
            self.writer.write(data)
            await self.writer.drain()
        except (ConnectionError, OSError) as e:
            logger.debug(f"[{self.id}] Write failed: {e}")
            ok = False
        finally:
            await self.close()
        return ok

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self.is_closed:
            return
        self.state = ConnectionState.CLOSED
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            pass  # Peer already gone
