import pytest

from coserve.connection import HELLO_PAGE, Connection, ConnectionManager
from coserve.parser import ResponseParser


class FakeReader:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    async def read(self, n=-1):
        if not self._chunks:
            return b""
        item = self._chunks.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeWriter:
    def __init__(self, drain_error=None):
        self.data = bytearray()
        self.closed = False
        self._drain_error = drain_error

    def write(self, data):
        self.data += data

    async def drain(self):
        if self._drain_error is not None:
            raise self._drain_error

    def is_closing(self):
        return self.closed

    def close(self):
        self.closed = True


def _connection(chunks, writer=None):
    manager = ConnectionManager()
    conn = Connection(FakeReader(chunks), writer or FakeWriter(), manager)
    manager.add(conn)
    return manager, conn


def _parse_response(data):
    parser = ResponseParser()
    parser.parse(bytes(data))
    return parser


class _Dummy:
    def __init__(self, conn_id):
        self.conn_id = conn_id


def test_manager_add_get_remove():
    manager = ConnectionManager()
    first, second = _Dummy(3), _Dummy(4)
    manager.add(first)
    manager.add(second)
    assert len(manager) == 2
    assert 3 in manager
    assert manager.get(3) is first
    manager.remove(3)
    assert 3 not in manager
    assert manager.get(3) is None
    assert len(manager) == 1


def test_manager_remove_missing_is_harmless():
    manager = ConnectionManager()
    manager.remove(42)
    assert len(manager) == 0


def test_manager_instance_is_shared():
    shared = ConnectionManager.instance()
    other = ConnectionManager.instance()
    dummy = _Dummy(-7001)
    shared.add(dummy)
    try:
        assert -7001 in other
        assert other.get(-7001) is dummy
    finally:
        shared.remove(-7001)
    assert other.get(-7001) is None


def test_pending_tasks_run_once_on_execute():
    manager = ConnectionManager()
    calls = []
    manager.post_task(lambda: calls.append("a"))
    manager.post_task(lambda: calls.append("b"))
    assert calls == []
    manager.execute_pending_tasks()
    assert calls == ["a", "b"]
    manager.execute_pending_tasks()
    assert calls == ["a", "b"]


def test_tasks_posted_while_executing_wait_for_next_round():
    manager = ConnectionManager()
    dummy = _Dummy(1)

    def outer():
        manager.add(dummy)
        manager.post_task(lambda: manager.remove(1))

    manager.post_task(outer)
    assert 1 not in manager
    manager.execute_pending_tasks()
    assert 1 in manager
    assert manager.get(1) is dummy
    manager.execute_pending_tasks()
    assert 1 not in manager
    assert len(manager) == 0


def test_connection_ids_are_unique():
    manager = ConnectionManager()
    first = Connection(FakeReader([]), FakeWriter(), manager)
    second = Connection(FakeReader([]), FakeWriter(), manager)
    assert first.conn_id != second.conn_id


@pytest.mark.asyncio
async def test_get_request_receives_hello_page():
    manager, conn = _connection([b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"])
    await conn.handle()
    response = _parse_response(conn.writer.data)
    assert response.status_code == "200"
    assert response.body == HELLO_PAGE.encode()
    assert response.header_map["Content-Type"] == "text/html"
    assert response.header_map["Content-Length"] == str(len(HELLO_PAGE))
    assert response.header_map["Server"] == "coserve"
    assert conn.writer.closed


@pytest.mark.asyncio
async def test_request_body_is_echoed_across_chunks():
    manager, conn = _connection([
        b"POST /echo HTTP/1.1\r\nContent-Length: 4\r\n",
        b"\r\npi",
        b"ng",
    ])
    await conn.handle()
    response = _parse_response(conn.writer.data)
    assert response.body == b"ping"
    assert response.header_map["Content-Type"] == "text/plain"
    assert response.header_map["Content-Length"] == "4"


@pytest.mark.asyncio
async def test_keep_alive_serves_several_requests():
    request = b"GET / HTTP/1.1\r\n\r\n"
    manager, conn = _connection([request, request])
    await conn.handle()
    data = bytes(conn.writer.data)
    assert data.count(b"HTTP/1.1 200 OK\r\n") == 2
    # headers are cleared between responses
    assert data.count(b"Server: coserve\r\n") == 1


@pytest.mark.asyncio
async def test_removal_is_deferred_until_pending_tasks_run():
    manager, conn = _connection([b"GET / HTTP/1.1\r\n\r\n"])
    await conn.handle()
    assert conn.conn_id in manager
    manager.execute_pending_tasks()
    assert conn.conn_id not in manager
    assert len(manager) == 0


@pytest.mark.asyncio
async def test_invalid_content_length_closes_connection():
    manager, conn = _connection([b"POST / HTTP/1.1\r\nContent-Length: abc\r\n\r\n"])
    await conn.handle()
    assert conn.writer.data == b""
    assert conn.writer.closed
    manager.execute_pending_tasks()
    assert conn.conn_id not in manager


@pytest.mark.asyncio
async def test_write_failure_closes_connection():
    writer = FakeWriter(drain_error=BrokenPipeError())
    manager, conn = _connection([b"GET / HTTP/1.1\r\n\r\n"], writer)
    await conn.handle()
    assert writer.closed
    manager.execute_pending_tasks()
    assert len(manager) == 0


@pytest.mark.asyncio
async def test_read_error_closes_connection():
    manager, conn = _connection([ConnectionResetError()])
    await conn.handle()
    assert conn.writer.data == b""
    assert conn.writer.closed
    manager.execute_pending_tasks()
    assert conn.conn_id not in manager