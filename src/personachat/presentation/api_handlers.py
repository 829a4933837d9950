"""HTTP API handlers."""

import logging
from datetime import datetime, timezone

from aiohttp import web
from pydantic import ValidationError as PayloadValidationError

from personachat.application.services import LLMOrchestrator
from personachat.domain.entities import ProviderId
from personachat.domain.services import PersonaRegistry
from personachat.presentation.schemas import ProviderUpdateRequest

logger = logging.getLogger(__name__)


def register_api_routes(
    app: web.Application,
    registry: PersonaRegistry,
    orchestrator: LLMOrchestrator,
) -> None:
    """Register the ``/api`` routes.

    Args:
        app: aiohttp application.
        registry: Registered personas.
        orchestrator: Shared LLM orchestrator.
    """

    async def list_personas(request: web.Request) -> web.Response:
        return web.json_response([persona.to_summary() for persona in registry])

    async def get_provider(request: web.Request) -> web.Response:
        return web.json_response({"provider": orchestrator.get_provider().value})

    async def set_provider(request: web.Request) -> web.Response:
        """Handle POST /api/llm-provider."""
        try:
            body = ProviderUpdateRequest.model_validate(await request.json())
        except (ValueError, PayloadValidationError) as e:
            logger.info("Invalid provider update request: %s", e)
            return web.json_response(
                {"success": False, "error": "Invalid provider"}, status=400
            )

        if not orchestrator.set_provider(body.provider):
            return web.json_response(
                {"success": False, "error": "Invalid provider"}, status=400
            )
        return web.json_response(
            {"success": True, "provider": orchestrator.get_provider().value}
        )

    async def health(request: web.Request) -> web.Response:
        """Handle GET /api/health with live provider probes."""
        try:
            connections = await orchestrator.test_connections()
        except Exception as e:
            logger.exception("Error in /api/health")
            return web.json_response(
                {
                    "status": "error",
                    "error": str(e),
                    "connections": {provider.value: False for provider in ProviderId},
                    "currentProvider": orchestrator.get_provider().value,
                },
                status=500,
            )
        return web.json_response(
            {
                "status": "ok",
                "connections": connections,
                "currentProvider": orchestrator.get_provider().value,
            }
        )

    async def debug(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "personas": registry.ids(),
                "llmProvider": orchestrator.get_provider().value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    app.router.add_get("/api/personas", list_personas)
    app.router.add_get("/api/llm-provider", get_provider)
    app.router.add_post("/api/llm-provider", set_provider)
    app.router.add_get("/api/health", health)
    app.router.add_get("/api/debug", debug)
