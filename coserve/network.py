"""Socket setup helpers: address resolution, listening sockets, errors."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

_log = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "unknown address"


class NetworkError(RuntimeError):
    """A network operation failed; the message names the operation."""

    def __init__(self, operation: str, reason: str = "operation failed") -> None:
        super().__init__(f"{operation}: {reason}")
        self.operation = operation
        self.reason = reason


@dataclass(frozen=True)
class ResolvedAddress:
    """The first result of resolving a host and port for a TCP socket."""

    family: int
    type: int
    proto: int
    sockaddr: tuple


def check_result(result: int, operation: str) -> int:
    """Return ``result``, or raise NetworkError when it signals failure (-1)."""
    if result == -1:
        raise NetworkError(operation)
    return result


def resolve_address(host: str | None, port: int | str) -> ResolvedAddress:
    """Resolve ``host`` and ``port`` to a stream socket address (IPv4 or IPv6)."""
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as exc:
        raise NetworkError("getaddrinfo", exc.strerror or str(exc)) from exc
    if not infos:
        raise NetworkError("getaddrinfo", "no addresses found")
    family, sock_type, proto, _, sockaddr = infos[0]
    return ResolvedAddress(family, sock_type, proto, sockaddr)


def create_listening_socket(host: str | None, port: int | str) -> socket.socket:
    """Create a non-blocking socket bound to ``host:port`` and listening."""
    address = resolve_address(host, port)
    _log.info("getaddrinfo succeeded")
    try:
        sock = socket.socket(address.family, address.type, address.proto)
    except OSError as exc:
        raise NetworkError("socket", exc.strerror or str(exc)) from exc
    _log.info("Socket created with fd: %d", sock.fileno())

    operation = "setsockopt"
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        operation = "bind"
        sock.bind(address.sockaddr)
        operation = "listen"
        sock.listen(socket.SOMAXCONN)
        operation = "setblocking"
        sock.setblocking(False)
    except OSError as exc:
        sock.close()
        raise NetworkError(operation, exc.strerror or str(exc)) from exc

    _log.info("Socket bound and listening on %s:%s", host, port)
    return sock


def format_address(address: tuple) -> str:
    """Render a socket address as ``host:port`` with numeric host and port."""
    flags = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
    try:
        host, service = socket.getnameinfo(address, flags)
    except (OSError, TypeError, ValueError, OverflowError):
        return UNKNOWN_ADDRESS
    return f"{host}:{service}"