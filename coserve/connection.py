"""Client connections and the registry that keeps track of them."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any, ClassVar

from coserve.http import HttpRequest, HttpResponse, send_response

BUFFER_SIZE = 4096
HELLO_PAGE = "<html><body><h1>Hello, World!</h1></body></html>"

_log = logging.getLogger(__name__)
_ids = itertools.count(1)


class ConnectionManager:
    """Registry of live connections plus a queue of deferred tasks."""

    _instance: ClassVar[ConnectionManager | None] = None

    def __init__(self) -> None:
        self._connections: dict[int, Connection] = {}
        self._pending: list[Callable[[], object]] = []

    @classmethod
    def instance(cls) -> ConnectionManager:
        """The process-wide shared manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def add(self, connection: Connection) -> None:
        self._connections[connection.conn_id] = connection

    def get(self, conn_id: int) -> Connection | None:
        return self._connections.get(conn_id)

    def remove(self, conn_id: int) -> None:
        self._connections.pop(conn_id, None)

    def post_task(self, task: Callable[[], object]) -> None:
        """Queue ``task`` to run on the next call to execute_pending_tasks."""
        self._pending.append(task)

    def execute_pending_tasks(self) -> None:
        """Run the queued tasks; tasks queued meanwhile wait for the next call."""
        tasks, self._pending = self._pending, []
        for task in tasks:
            task()

    def __contains__(self, conn_id: object) -> bool:
        return conn_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)


class Connection:
    """One client connection served over asyncio streams.

    Requests are answered one after another on the same connection: a
    request with a body is echoed back as plain text, any other request
    receives a small HTML page.
    """

    def __init__(self, reader: Any, writer: Any, manager: ConnectionManager | None = None) -> None:
        self.conn_id = next(_ids)
        self.reader = reader
        self.writer = writer
        self.manager = manager if manager is not None else ConnectionManager.instance()
        self.request = HttpRequest()
        self.response = HttpResponse()

    async def handle(self) -> None:
        """Serve requests until the peer closes the connection or an error occurs."""
        try:
            while True:
                if not await self._read_request():
                    self.mark_for_deletion()
                    return
                self._prepare_response()
                try:
                    await send_response(self.writer, self.response)
                except Exception:
                    self.mark_for_deletion()
                    return
                self.request.reset()
                self.response.reset()
        except Exception as exc:
            _log.error("connection handling error: %s", exc)
        self.mark_for_deletion()

    def mark_for_deletion(self) -> None:
        """Close the stream and schedule removal from the manager."""
        if not self.writer.is_closing():
            self.writer.close()
        conn_id = self.conn_id
        manager = self.manager

        def _remove() -> None:
            manager.remove(conn_id)
            _log.info("connection removed: %d", conn_id)

        manager.post_task(_remove)

    async def _read_request(self) -> bool:
        """Read until a full request is parsed; False when the stream ended."""
        while True:
            try:
                data = await self.reader.read(BUFFER_SIZE)
            except OSError:
                return False
            if not data:
                return False
            self.request.feed(data)
            if self.request.is_complete():
                return True

    def _prepare_response(self) -> None:
        self.response.set_status("200", "OK")
        body = self.request.body
        if body:
            self.response.set_body(body)
            self.response.set_header("Content-Type", "text/plain")
        else:
            self.response.set_body(HELLO_PAGE)
            self.response.set_header("Content-Type", "text/html")