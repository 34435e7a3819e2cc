"""
Unit tests for the connection wrapper.
"""

import asyncio

from fileserver.core.connection import Connection, ConnectionState
from conftest import FakeReader, FakeWriter, make_connection, run


class SlowReader:
    """Reader that never produces data."""

    async def read(self, n=-1):
        await asyncio.sleep(10)
        return b"late"


class BrokenReader:

    async def read(self, n=-1):
        raise ConnectionResetError("reset by peer")


class TestReadRequest:

    def test_reads_request(self):
        conn = make_connection(b"GET / HTTP/1.1\r\n\r\n")
        assert run(conn.read_request()) == b"GET / HTTP/1.1\r\n\r\n"
        assert conn.state is ConnectionState.PROCESSING

    def test_single_read_bounded_by_buffer(self):
        reader = FakeReader(b"x" * 100)
        conn = Connection(reader=reader, writer=FakeWriter(), buffer_size=64)

        assert run(conn.read_request()) == b"x" * 64
        assert reader.reads == 1

    def test_client_closed_early(self):
        conn = make_connection(b"")
        assert run(conn.read_request()) is None

    def test_timeout(self):
        conn = Connection(reader=SlowReader(), writer=FakeWriter(), read_timeout=0.05)
        assert run(conn.read_request()) is None

    def test_read_error(self):
        conn = Connection(reader=BrokenReader(), writer=FakeWriter())
        assert run(conn.read_request()) is None


class TestSendAndClose:

    def test_send(self, connection):
        assert run(connection.send_and_close(b"payload")) is True
        assert connection.writer.data == b"payload"
        assert connection.writer.closed
        assert connection.is_closed

    def test_second_send_dropped(self, connection):
        run(connection.send_and_close(b"one"))
        assert run(connection.send_and_close(b"two")) is False
        assert connection.writer.data == b"one"
        assert connection.writer.close_calls == 1

    def test_write_failure(self):
        conn = make_connection(fail_on_write=True)
        assert run(conn.send_and_close(b"lost")) is False
        assert conn.is_closed
        assert conn.writer.close_calls == 1

    def test_close_idempotent(self, connection):
        run(connection.close())
        run(connection.close())
        assert connection.writer.close_calls == 1


class TestProperties:

    def test_address(self):
        conn = make_connection(peer=("10.0.0.7", 40000))
        assert conn.address == ("10.0.0.7", 40000)
        assert conn.client_ip == "10.0.0.7"

    def test_unknown_peer(self):
        conn = make_connection(peer=None)
        assert conn.address == ("", 0)

    def test_ids_unique(self):
        assert make_connection().id != make_connection().id

    def test_initial_state(self, connection):
        assert connection.state is ConnectionState.NEW
