"""
pytest configuration and fixtures.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver.core.connection import Connection


class FakeReader:
    """Stands in for asyncio.StreamReader; hands out pre-set chunks."""

    def __init__(self, *chunks: bytes):
        self._chunks: List[bytes] = list(chunks)
        self.reads = 0

    async def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if not self._chunks:
            return b""
        chunk = self._chunks.pop(0)
        if n >= 0 and len(chunk) > n:
            self._chunks.insert(0, chunk[n:])
            chunk = chunk[:n]
        return chunk


class FakeWriter:
    """Stands in for asyncio.StreamWriter; records what was written."""

    def __init__(self, peer: Tuple[str, int] = ("127.0.0.1", 54321), fail_on_write: bool = False):
        self.peer = peer
        self.fail_on_write = fail_on_write
        self.chunks: List[bytes] = []
        self.closed = False
        self.close_calls = 0

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    def write(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionResetError("write on closed transport")
        if self.fail_on_write:
            raise BrokenPipeError("peer went away")
        self.chunks.append(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1

    async def wait_closed(self) -> None:
        pass

    def get_extra_info(self, name: str, default=None):
        if name == "peername":
            return self.peer
        return default


def make_connection(request: bytes = b"", **writer_kwargs) -> Connection:
    return Connection(reader=FakeReader(request), writer=FakeWriter(**writer_kwargs))


def parse_http_response(data: bytes) -> Tuple[str, int, str, Dict[str, str], bytes]:
    """Split raw response bytes into (version, status, reason, headers, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    version, code, reason = lines[0].split(" ", 2)
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return version, int(code), reason, headers, body


def run(coro):
    """Drive a coroutine to completion from a plain test function."""
    return asyncio.run(coro)


@pytest.fixture
def connection() -> Connection:
    """Connection whose writer records output."""
    return make_connection()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html  style.css  photo.JPG  notes.md  readme.txt  blob.bin
        docs/       (empty)
        guides/     intro.txt  advanced/  (empty)
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_text("<h1>Home</h1>")
    (root / "style.css").write_text("body { color: red; }")
    (root / "photo.JPG").write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
    (root / "notes.md").write_text("# Hi")
    (root / "readme.txt").write_text("plain text")
    (root / "blob.bin").write_bytes(b"\x00\x01\x02")
    (root / "docs").mkdir()
    guides = root / "guides"
    guides.mkdir()
    (guides / "intro.txt").write_text("intro")
    (guides / "advanced").mkdir()
    return root


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request as a browser would send it."""
    return (
        b"GET /docs/notes.md HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )
