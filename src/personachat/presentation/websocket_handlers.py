"""WebSocket event channel."""

import asyncio
import json
import logging
import uuid
from collections.abc import Awaitable, Callable

from aiohttp import WSMsgType, web
from pydantic import ValidationError as PayloadValidationError

from personachat.application.services import LLMOrchestrator, SessionManager
from personachat.config import ServerConfig
from personachat.domain.entities import ClientEvent, OutboundEvent
from personachat.domain.services import PersonaRegistry
from personachat.presentation.schemas import (
    ClientFrame,
    JoinPersonaPayload,
    SendMessagePayload,
)

logger = logging.getLogger(__name__)

WEBSOCKET_HEARTBEAT_SECONDS = 30.0


class WebSocketEmitter:
    """EventEmitter writing JSON frames to an aiohttp WebSocket."""

    def __init__(self, ws: web.WebSocketResponse) -> None:
        self._ws = ws

    async def emit(self, event: OutboundEvent) -> None:
        if self._ws.closed:
            logger.debug("WebSocket closed; dropping %s event", event.type.value)
            return
        try:
            await self._ws.send_json(event.to_frame())
        except ConnectionResetError:
            logger.debug("WebSocket reset; dropping %s event", event.type.value)


async def dispatch_frame(
    manager: SessionManager,
    emitter: WebSocketEmitter,
    raw: str,
) -> None:
    """Decode one client frame and route it to the session manager.

    Malformed frames are answered with an error event.

    Args:
        manager: Session manager of the connection.
        emitter: Emitter of the connection.
        raw: Raw text frame.
    """
    try:
        frame = ClientFrame.model_validate(json.loads(raw))
    except (json.JSONDecodeError, PayloadValidationError) as e:
        logger.info("Malformed frame on %s: %s", manager.connection_id, e)
        await emitter.emit(OutboundEvent.error("Malformed event"))
        return

    data = frame.data or {}
    try:
        event = ClientEvent(frame.event)
    except ValueError:
        logger.info("Unknown event on %s: %s", manager.connection_id, frame.event)
        await emitter.emit(OutboundEvent.error(f"Unknown event: {frame.event}"))
        return

    try:
        if event is ClientEvent.JOIN_PERSONA:
            join = JoinPersonaPayload.model_validate(data)
            await manager.join(join.persona_id)
        elif event is ClientEvent.SEND_MESSAGE:
            message = SendMessagePayload.model_validate(data)
            await manager.send(message.content)
        elif event is ClientEvent.CLEAR_CHAT:
            await manager.clear()
    except PayloadValidationError as e:
        logger.info("Invalid %s payload on %s: %s", event.value, manager.connection_id, e)
        await emitter.emit(OutboundEvent.error(f"Invalid payload for {event.value}"))


def create_websocket_handler(
    registry: PersonaRegistry,
    orchestrator: LLMOrchestrator,
    config: ServerConfig,
) -> Callable[[web.Request], Awaitable[web.WebSocketResponse]]:
    """Create the ``/ws`` request handler.

    Every connection gets its own SessionManager. Frames are handled in
    separate tasks so that ``clear-chat`` or ``join-persona`` are not
    held up by a reply being generated.

    Args:
        registry: Registered personas.
        orchestrator: Shared LLM orchestrator.
        config: Server configuration.

    Returns:
        aiohttp handler.
    """

    async def handle_websocket(request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse(heartbeat=WEBSOCKET_HEARTBEAT_SECONDS)
        await ws.prepare(request)

        connection_id = uuid.uuid4().hex
        emitter = WebSocketEmitter(ws)
        manager = SessionManager(
            connection_id,
            registry,
            orchestrator,
            emitter,
            reply_delay_seconds=config.reply_delay_seconds,
            expose_error_details=config.expose_error_details,
            max_message_length=config.max_message_length,
        )
        frame_tasks: set[asyncio.Task[None]] = set()
        logger.info("User connected: %s", connection_id)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    task = asyncio.create_task(
                        dispatch_frame(manager, emitter, msg.data)
                    )
                    frame_tasks.add(task)
                    task.add_done_callback(frame_tasks.discard)
                elif msg.type == WSMsgType.ERROR:
                    logger.warning(
                        "WebSocket error on %s: %s", connection_id, ws.exception()
                    )
        finally:
            await manager.disconnect()
            logger.info("User disconnected: %s", connection_id)

        return ws

    return handle_websocket
