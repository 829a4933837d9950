"""HTTP server."""

from personachat.infrastructure.http.server import ChatServer

__all__ = ["ChatServer"]
