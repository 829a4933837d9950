"""Per-connection chat session state machine."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from personachat.application.services.orchestrator import LLMOrchestrator
from personachat.domain.entities import (
    OutboundEvent,
    Persona,
    Sender,
    ServerEvent,
    Session,
    Turn,
)
from personachat.domain.exceptions import (
    CapacityError,
    ChatError,
    ConfigurationError,
    InvalidMessageError,
    NoActiveSessionError,
    ProviderConnectionError,
    UnknownPersonaError,
    ValidationError,
)
from personachat.domain.services import EventEmitter, PersonaRegistry

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error while processing your message."


def user_safe_message(error: Exception) -> str:
    """Client-facing text for a failed request.

    Args:
        error: The exception raised while handling the request.

    Returns:
        Message that reveals the error category only.
    """
    if isinstance(error, ValidationError):
        return str(error)
    if isinstance(error, ConfigurationError):
        return "API key issue. Please check your configuration."
    if isinstance(error, CapacityError):
        return "API quota or billing issue. Please check your account."
    if isinstance(error, ProviderConnectionError):
        return "Network connection issue. Please try again."
    return GENERIC_ERROR_MESSAGE


class SessionManager:
    """Conversation state for one client connection.

    Idle until a persona is joined; Active while a session exists.
    ``clear``, ``disconnect`` and joining another persona drop the
    session and its history.
    """

    def __init__(
        self,
        connection_id: str,
        registry: PersonaRegistry,
        orchestrator: LLMOrchestrator,
        emitter: EventEmitter,
        *,
        reply_delay_seconds: float = 0.5,
        expose_error_details: bool = False,
        max_message_length: int | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            connection_id: Transport-level connection identifier.
            registry: Registered personas.
            orchestrator: Shared LLM orchestrator.
            emitter: Sends events to this connection.
            reply_delay_seconds: Pause before delivering a generated reply.
            expose_error_details: Attach raw error text to error events.
            max_message_length: Reject longer messages (None for no limit).
        """
        self._connection_id = connection_id
        self._registry = registry
        self._orchestrator = orchestrator
        self._emitter = emitter
        self._reply_delay = reply_delay_seconds
        self._expose_error_details = expose_error_details
        self._max_message_length = max_message_length

        self._session: Session | None = None
        self._send_lock = asyncio.Lock()
        self._pending_replies: set[asyncio.Task[None]] = set()
        self._last_stamp_ms = 0
        self._closed = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    async def join(self, persona_id: str) -> None:
        """Start a new session with a persona.

        An unknown id emits an error and leaves the current state as is.
        """
        try:
            persona = self._registry.require(persona_id)
        except UnknownPersonaError as e:
            logger.info("Connection %s: %s", self._connection_id, e)
            await self._emit(OutboundEvent.error("Invalid persona"))
            return

        self._end_session()
        session = Session(
            id=Session.make_id(self._connection_id, persona.id, self._next_stamp_ms()),
            persona=persona,
        )
        self._session = session
        logger.info(
            "Connection %s joined persona %s (session %s)",
            self._connection_id,
            persona.id,
            session.id,
        )

        await self._emit(
            OutboundEvent(
                type=ServerEvent.PERSONA_JOINED,
                payload={"persona": persona.to_summary(), "sessionId": session.id},
            )
        )
        await self._emit(self._ai_message(persona.greeting, persona))

    async def send(self, content: Any) -> None:
        """Handle a user message: record it, generate and deliver a reply.

        Emission order: user message, typing on, typing off, then the
        reply after the configured delay. Failures emit an error event
        instead of the reply and leave no assistant turn in the history.
        """
        try:
            text = self._validate_content(content)
        except ValidationError as e:
            await self._emit_error(e)
            return

        async with self._send_lock:
            session = self._session
            if session is None:
                await self._emit_error(NoActiveSessionError("No active persona session"))
                return

            persona = session.persona
            logger.info(
                "Received message for %s (session %s, %d characters)",
                persona.id,
                session.id,
                len(text),
            )

            session.add_turn(Turn.user(text))
            await self._emit(
                OutboundEvent.chat_message(
                    message_id=self._next_stamp_ms(),
                    content=text,
                    sender=Sender.USER,
                    timestamp=datetime.now(timezone.utc),
                )
            )
            await self._emit(OutboundEvent.typing(True, persona.name))

            if session is not self._session:
                logger.info("Session %s ended before generation", session.id)
                await self._emit(OutboundEvent.typing(False))
                return

            try:
                reply = await self._orchestrator.generate(session.history(), persona)
            except Exception as e:
                if isinstance(e, ChatError):
                    logger.error("Error generating response for %s: %s", persona.id, e)
                else:
                    logger.exception("Unexpected error generating response")
                await self._emit(OutboundEvent.typing(False))
                await self._emit_error(e)
                return

            if session is not self._session:
                # Cleared, switched or disconnected while generating
                logger.info("Dropping reply for ended session %s", session.id)
                await self._emit(OutboundEvent.typing(False))
                return

            session.add_turn(Turn.assistant(reply))
            await self._emit(OutboundEvent.typing(False))
            self._schedule_reply(self._ai_message(reply, persona))

    async def clear(self) -> None:
        """Drop the session and its history, then confirm to the client."""
        self._end_session()
        await self._emit(OutboundEvent(type=ServerEvent.CHAT_CLEARED))

    async def disconnect(self) -> None:
        """Drop the session; nothing is emitted afterwards."""
        self._closed = True
        self._end_session()
        logger.info("Connection %s disconnected", self._connection_id)

    async def flush(self) -> None:
        """Wait until every scheduled reply has been delivered or cancelled."""
        while self._pending_replies:
            await asyncio.gather(*self._pending_replies, return_exceptions=True)

    def _validate_content(self, content: Any) -> str:
        if not isinstance(content, str) or not content.strip():
            raise InvalidMessageError("Message content is required")
        if (
            self._max_message_length is not None
            and len(content) > self._max_message_length
        ):
            raise InvalidMessageError(
                f"Message is too long (maximum {self._max_message_length} characters)"
            )
        return content

    def _end_session(self) -> None:
        for task in list(self._pending_replies):
            task.cancel()
        if self._session is not None:
            logger.debug("Ending session %s", self._session.id)
            self._session = None

    def _schedule_reply(self, event: OutboundEvent) -> None:
        task = asyncio.create_task(self._deliver_later(event))
        self._pending_replies.add(task)
        task.add_done_callback(self._pending_replies.discard)

    async def _deliver_later(self, event: OutboundEvent) -> None:
        if self._reply_delay > 0:
            await asyncio.sleep(self._reply_delay)
        await self._emit(event)

    def _ai_message(self, content: str, persona: Persona) -> OutboundEvent:
        return OutboundEvent.chat_message(
            message_id=self._next_stamp_ms(),
            content=content,
            sender=Sender.AI,
            timestamp=datetime.now(timezone.utc),
            persona=persona.name,
        )

    def _next_stamp_ms(self) -> int:
        """Millisecond epoch stamp, strictly increasing per connection."""
        stamp = max(int(time.time() * 1000), self._last_stamp_ms + 1)
        self._last_stamp_ms = stamp
        return stamp

    async def _emit_error(self, error: Exception) -> None:
        details = str(error) if self._expose_error_details else None
        await self._emit(OutboundEvent.error(user_safe_message(error), details))

    async def _emit(self, event: OutboundEvent) -> None:
        if self._closed:
            logger.debug(
                "Connection %s closed; dropping %s event",
                self._connection_id,
                event.type.value,
            )
            return
        await self._emitter.emit(event)
