"""HTTP request and response objects and response transmission."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from coserve.parser import RequestParser

DEFAULT_CONTENT_TYPE = "text/html; charset=UTF-8"
SERVER_NAME = "coserve"


class ConnectionClosedError(ConnectionError):
    """The peer closed the connection while a response was being sent."""


def _parse_query(url: str) -> dict[str, str]:
    _, has_query, query = url.partition("?")
    params: dict[str, str] = {}
    if not has_query:
        return params
    for item in query.split("&"):
        key, equals, value = item.partition("=")
        if equals:
            params[key] = value
    return params


class HttpRequest:
    """An HTTP request built up from the chunks read off a connection."""

    def __init__(self) -> None:
        self._parser = RequestParser()
        self._params: dict[str, str] = {}

    def feed(self, data: bytes | bytearray | memoryview | str) -> None:
        """Feed received data; query parameters are parsed once complete."""
        self._parser.parse(data)
        if self._parser.is_complete():
            self._params = _parse_query(self._parser.url)

    def is_complete(self) -> bool:
        return self._parser.is_complete()

    @property
    def method(self) -> str:
        return self._parser.method

    @property
    def url(self) -> str:
        return self._parser.url

    @property
    def path(self) -> str:
        """The URL without its query string."""
        return self._parser.url.partition("?")[0]

    @property
    def version(self) -> str:
        return self._parser.version

    def header(self, key: str) -> str:
        """Value of a header, or an empty string when absent."""
        return self._parser.header_map.get(key, "")

    @property
    def headers(self) -> dict[str, str]:
        return self._parser.header_map

    @property
    def body(self) -> bytes:
        return self._parser.body

    def param(self, key: str) -> str:
        """Value of a query parameter, or an empty string when absent."""
        return self._params.get(key, "")

    @property
    def params(self) -> dict[str, str]:
        return self._params

    def reset(self) -> None:
        self._parser.reset()
        self._params = {}


def _default_headers() -> dict[str, str]:
    return {"Server": SERVER_NAME, "Content-Type": DEFAULT_CONTENT_TYPE}


@dataclass
class HttpResponse:
    """An HTTP response that renders to the bytes sent on the wire."""

    version: str = "HTTP/1.1"
    status_code: str = "200"
    status_message: str = "OK"
    headers: dict[str, str] = field(default_factory=_default_headers)
    body: bytes = b""

    def reset(self) -> None:
        """Restore the status line and drop all headers and the body."""
        self.version = "HTTP/1.1"
        self.status_code = "200"
        self.status_message = "OK"
        self.headers.clear()
        self.body = b""

    def set_status(self, code: str, message: str) -> None:
        self.status_code = str(code)
        self.status_message = message

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def set_body(self, body: bytes | str) -> None:
        """Set the body (text is UTF-8 encoded) and its Content-Length."""
        self.body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self.headers["Content-Length"] = str(len(self.body))

    def set_content_type(self, content_type: str) -> None:
        self.headers["Content-Type"] = content_type

    def body_length(self) -> int:
        return len(self.body)

    def render(self) -> bytes:
        lines = [f"{self.version} {self.status_code} {self.status_message}"]
        lines.extend(f"{key}: {value}" for key, value in self.headers.items())
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body

    def ok(self, body: bytes | str = "", content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        self.set_status("200", "OK")
        self.set_content_type(content_type)
        self.set_body(body)

    def not_found(self, body: bytes | str = "404 Not Found") -> None:
        self.set_status("404", "Not Found")
        self.set_body(body)

    def server_error(self, body: bytes | str = "500 Internal Server Error") -> None:
        self.set_status("500", "Internal Server Error")
        self.set_body(body)

    def bad_request(self, body: bytes | str = "400 Bad Request") -> None:
        self.set_status("400", "Bad Request")
        self.set_body(body)

    def redirect(self, url: str, permanent: bool = False) -> None:
        if permanent:
            self.set_status("301", "Moved Permanently")
        else:
            self.set_status("302", "Found")
        self.set_header("Location", url)
        self.set_body("")

    def json(self, json_body: bytes | str) -> None:
        self.set_content_type("application/json; charset=UTF-8")
        self.set_body(json_body)


async def send_response(writer: Any, response: HttpResponse) -> None:
    """Write a rendered response to an asyncio stream writer.

    Raises ConnectionClosedError when the peer has gone away.
    """
    if writer.is_closing():
        raise ConnectionClosedError("Connection closed")
    try:
        writer.write(response.render())
        await writer.drain()
    except (BrokenPipeError, ConnectionResetError) as exc:
        raise ConnectionClosedError("connection closed by client") from exc