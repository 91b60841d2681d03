"""Incremental parsing of HTTP/1.x request and response messages."""

from __future__ import annotations

import re

_SEPARATOR = b"\r\n\r\n"
_CRLF = "\r\n"
_CONTENT_LENGTH = "Content-Length: "
_NUMBER = re.compile(r"\s*\+?(\d+)")


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class HttpParser:
    """Accumulates raw message bytes until headers and body have arrived.

    The header block is kept as text (decoded as Latin-1, so no byte is
    lost); the body is kept as bytes.
    """

    def __init__(self) -> None:
        self.header = ""
        self.headline = ""
        self.header_map: dict[str, str] = {}
        self.body = b""
        self.content_length = 0
        self.header_finished = False

    def parse(self, data: bytes | bytearray | memoryview | str) -> None:
        """Feed the next chunk of the message."""
        chunk = _as_bytes(data)
        if self.header_finished:
            self.body += chunk
            return

        buffered = self.header.encode("latin-1") + chunk
        head, separator, rest = buffered.partition(_SEPARATOR)
        if not separator:
            self.header = buffered.decode("latin-1")
            return

        self.header = head.decode("latin-1")
        self.body = rest
        self.header_finished = True
        self.read_content_length()

    def extract_header(self) -> None:
        """Fill ``header_map`` from the header lines after the first line."""
        for line in self.header.split(_CRLF)[1:]:
            key, colon, value = line.partition(":")
            if colon:
                self.header_map[key] = value.strip()

    def extract_head_line(self) -> tuple[str, str, str]:
        """Split the first line into its three space-separated parts.

        Returns three empty strings when the line has fewer than two spaces.
        """
        self.headline = self.header.partition(_CRLF)[0]
        first = self.headline.find(" ")
        if first == -1:
            return "", "", ""
        second = self.headline.find(" ", first + 1)
        if second == -1:
            return "", "", ""
        return (
            self.headline[:first],
            self.headline[first + 1:second],
            self.headline[second + 1:],
        )

    def read_content_length(self) -> int:
        """Set ``content_length`` from the header block and return it.

        Raises ValueError when the header is present but holds no number.
        """
        pos = self.header.find(_CONTENT_LENGTH)
        if pos == -1:
            self.content_length = 0
            return 0
        pos += len(_CONTENT_LENGTH)
        end = self.header.find(_CRLF, pos)
        raw = self.header[pos:] if end == -1 else self.header[pos:end]
        match = _NUMBER.match(raw)
        if match is None:
            raise ValueError(f"invalid Content-Length: {raw!r}")
        self.content_length = int(match.group(1))
        return self.content_length

    def is_complete(self) -> bool:
        return self.header_finished and len(self.body) >= self.content_length

    def reset(self) -> None:
        self.header = ""
        self.headline = ""
        self.header_map.clear()
        self.body = b""
        self.content_length = 0
        self.header_finished = False


class RequestParser(HttpParser):
    """Parser that also extracts method, URL and version of a request."""

    def __init__(self) -> None:
        super().__init__()
        self.method = ""
        self.url = ""
        self.version = ""

    def parse(self, data: bytes | bytearray | memoryview | str) -> None:
        super().parse(data)
        if self.is_complete():
            self.extract_header()
            self.method, self.url, self.version = self.extract_head_line()

    def reset(self) -> None:
        super().reset()
        self.method = ""
        self.url = ""
        self.version = ""


class ResponseParser(HttpParser):
    """Parser that also extracts the status code of a response."""

    def __init__(self) -> None:
        super().__init__()
        self.status_code = ""

    def parse(self, data: bytes | bytearray | memoryview | str) -> None:
        super().parse(data)
        if self.is_complete():
            self.extract_header()
            _, self.status_code, _ = self.extract_head_line()

    def reset(self) -> None:
        super().reset()
        self.status_code = ""