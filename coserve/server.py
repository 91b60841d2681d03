"""The HTTP server: listening socket, accept loop and command entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging

from coserve.connection import Connection, ConnectionManager
from coserve.network import create_listening_socket

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

_log = logging.getLogger(__name__)


async def serve(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> asyncio.AbstractServer:
    """Start accepting connections on ``host:port`` and return the server."""
    sock = create_listening_socket(host, port)
    manager = ConnectionManager.instance()

    async def on_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        connection = Connection(reader, writer, manager)
        manager.add(connection)
        try:
            await connection.handle()
        except Exception as exc:
            _log.error("error while handling connection: %s", exc)
            connection.mark_for_deletion()
        finally:
            manager.execute_pending_tasks()

    try:
        return await asyncio.start_server(on_client, sock=sock)
    except BaseException:
        sock.close()
        raise


async def _serve_forever(host: str, port: int) -> None:
    server = await serve(host, port)
    async with server:
        await server.serve_forever()


def run_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Run the server until interrupted."""
    asyncio.run(_serve_forever(host, port))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="coserve", description="Minimal HTTP server.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    _log.info("Server starting...")
    try:
        run_server(args.host, args.port)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        _log.error("error: %s", exc)
        return 1
    return 0