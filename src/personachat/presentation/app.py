"""aiohttp application factory."""

import logging
from pathlib import Path

import aiohttp_cors
from aiohttp import web

from personachat.application.services import LLMOrchestrator
from personachat.config import ServerConfig
from personachat.domain.services import PersonaRegistry
from personachat.presentation.api_handlers import register_api_routes
from personachat.presentation.websocket_handlers import create_websocket_handler

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"


def enable_cors(app: web.Application, origins: list[str]) -> None:
    """Allow cross-origin calls to the HTTP API from ``origins``."""
    options = aiohttp_cors.ResourceOptions(allow_headers="*", expose_headers="*")
    cors = aiohttp_cors.setup(app, defaults={origin: options for origin in origins})
    for resource in list(app.router.resources()):
        if resource.canonical.startswith(API_PREFIX):
            cors.add(resource)
    logger.info("CORS enabled for %s", ", ".join(origins))


def create_app(
    registry: PersonaRegistry,
    orchestrator: LLMOrchestrator,
    config: ServerConfig,
) -> web.Application:
    """Build the web application: HTTP API, WebSocket, CORS and static files.

    Args:
        registry: Registered personas.
        orchestrator: Shared LLM orchestrator.
        config: Server configuration.

    Returns:
        Configured aiohttp application.
    """
    app = web.Application()
    register_api_routes(app, registry, orchestrator)
    app.router.add_get("/ws", create_websocket_handler(registry, orchestrator, config))

    if config.cors_origins:
        enable_cors(app, config.cors_origins)

    if config.static_dir:
        static_path = Path(config.static_dir)
        if static_path.is_dir():
            index_path = static_path / "index.html"

            async def index(request: web.Request) -> web.FileResponse:
                return web.FileResponse(index_path)

            if index_path.is_file():
                app.router.add_get("/", index)
            app.router.add_static("/", static_path)
            logger.info("Serving static files from %s", static_path)
        else:
            logger.warning("Static directory not found: %s", static_path)

    return app
