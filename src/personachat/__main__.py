"""Application entry point."""

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from personachat.application.services import FallbackResponder, LLMOrchestrator
from personachat.config import Config, ConfigError, LoggingConfig, load_config
from personachat.domain.services import PersonaRegistry
from personachat.infrastructure.http import ChatServer
from personachat.infrastructure.llm import LLMClient, create_adapter
from personachat.presentation import create_app

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PERSONACHAT_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


def _log_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(config: LoggingConfig | None) -> None:
    """Apply the root level, the record format and per-logger levels.

    Unknown level names fall back to INFO. Without a config the start-up
    defaults stay in place.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(_log_level(config.level))
    formatter = logging.Formatter(config.format)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)

    for name, level in (config.loggers or {}).items():
        logging.getLogger(name).setLevel(_log_level(level))
        logger.debug("Logger %s set to %s", name, level.upper())


def resolve_config_path(argv: list[str]) -> Path:
    """Config path from the first argument, the environment or the default."""
    if len(argv) > 1:
        return Path(argv[1])
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))


def build_orchestrator(config: Config) -> LLMOrchestrator:
    """Create one adapter per provider and the orchestrator owning them."""
    debug_llm_messages = bool(config.logging and config.logging.debug_llm_messages)
    adapters = {
        provider: create_adapter(
            LLMClient(provider, provider_config),
            debug_llm_messages=debug_llm_messages,
        )
        for provider, provider_config in config.llm.providers.items()
    }
    return LLMOrchestrator(
        adapters=adapters,
        fallback=FallbackResponder(),
        default_provider=config.llm.default_provider,
    )


async def report_connections(orchestrator: LLMOrchestrator) -> None:
    """Log provider availability once at start-up."""
    connections = await orchestrator.test_connections()
    logger.info("LLM connection status:")
    for provider, ok in connections.items():
        logger.info("   - %s: %s", provider, "available" if ok else "unavailable")
    logger.info("   - Current provider: %s", orchestrator.get_provider().value)
    if not orchestrator.has_credentials():
        logger.warning("No API keys configured; replies will be demo responses")


async def main() -> None:
    """Start the chat server."""
    load_dotenv()

    config_path = resolve_config_path(sys.argv)
    if not config_path.exists():
        logger.error("%s not found", config_path)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    registry = PersonaRegistry(config.personas)
    logger.info("Loaded personas: %s", registry.ids())

    orchestrator = build_orchestrator(config)
    app = create_app(registry, orchestrator, config.server)
    server = ChatServer(app, host=config.server.host, port=config.server.port)

    await server.start()
    logger.info("WebSocket endpoint: ws://localhost:%d/ws", server.port)
    logger.info("API endpoints:")
    logger.info("   - GET  /api/personas - List available personas")
    logger.info("   - GET  /api/llm-provider - Get current LLM provider")
    logger.info("   - POST /api/llm-provider - Set LLM provider")
    logger.info("   - GET  /api/health - Check API connections")

    connection_task = asyncio.create_task(report_connections(orchestrator))

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    await stop_event.wait()

    logger.info("Shutting down...")
    connection_task.cancel()
    await asyncio.gather(connection_task, return_exceptions=True)
    await server.stop()
    logger.info("Shutdown complete")


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
