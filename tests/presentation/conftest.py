"""Fixtures running the real aiohttp application on a free port."""

from collections.abc import AsyncGenerator

import pytest

from personachat.application.services import LLMOrchestrator
from personachat.config import ServerConfig
from personachat.domain.services import PersonaRegistry
from personachat.infrastructure.http import ChatServer
from personachat.presentation import create_app


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(host="127.0.0.1", port=0, reply_delay_seconds=0)


@pytest.fixture
async def server(
    registry: PersonaRegistry,
    orchestrator: LLMOrchestrator,
    server_config: ServerConfig,
) -> AsyncGenerator[ChatServer, None]:
    """Start a ChatServer and stop it after the test."""
    app = create_app(registry, orchestrator, server_config)
    chat_server = ChatServer(app, host=server_config.host, port=server_config.port)
    await chat_server.start()
    try:
        yield chat_server
    finally:
        await chat_server.stop()


@pytest.fixture
def base_url(server: ChatServer) -> str:
    return f"http://127.0.0.1:{server.port}"
