"""Asynchronous keep-alive HTTP/1.1 server with an incremental request parser."""

__version__ = "1.0.0"
__all__ = ["__version__"]