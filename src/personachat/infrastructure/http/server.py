"""HTTP/WebSocket server lifecycle."""

import logging

from aiohttp import web

logger = logging.getLogger(__name__)


class ChatServer:
    """Runs an aiohttp application on a TCP site.

    Serves the chat API and the WebSocket channel built by
    ``personachat.presentation.create_app``.
    """

    def __init__(
        self,
        app: web.Application,
        host: str = "0.0.0.0",
        port: int = 3000,
    ) -> None:
        """Initialize the server.

        Args:
            app: aiohttp application to serve.
            host: Interface to bind.
            port: Port to listen on. Use 0 for any available port.
        """
        self._app = app
        self._host = host
        self._port = port
        self._actual_port = port
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def port(self) -> int:
        """Get the port the server is listening on."""
        return self._actual_port

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        # Get actual port (useful when port=0 for dynamic allocation)
        if self._site._server is not None:
            sockets = self._site._server.sockets  # type: ignore[union-attr]
            if sockets:
                self._actual_port = sockets[0].getsockname()[1]

        self._running = True
        logger.info("Server running on port %d", self.port)

    async def stop(self) -> None:
        """Stop the HTTP server, closing open WebSocket connections."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None

        self._running = False
        logger.info("Server stopped")
