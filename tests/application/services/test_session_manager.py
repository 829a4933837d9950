"""Tests for SessionManager."""

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, Mock

import pytest

from personachat.application.services import (
    FALLBACK_DISCLAIMER,
    FallbackResponder,
    LLMOrchestrator,
    SessionManager,
    user_safe_message,
)
from personachat.domain.entities import (
    OutboundEvent,
    Persona,
    ProviderId,
    Role,
    ServerEvent,
    Turn,
)
from personachat.domain.exceptions import (
    CapacityError,
    ConfigurationError,
    GenerationError,
    NoActiveSessionError,
    ProviderConnectionError,
)
from personachat.domain.services import PersonaRegistry


class RecordingEmitter:
    """EventEmitter that keeps every emitted event."""

    def __init__(self) -> None:
        self.events: list[OutboundEvent] = []

    async def emit(self, event: OutboundEvent) -> None:
        self.events.append(event)

    def types(self) -> list[ServerEvent]:
        return [event.type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def mock_orchestrator() -> Mock:
    orchestrator = Mock(spec=LLMOrchestrator)
    orchestrator.generate = AsyncMock(return_value="E equals mc squared.")
    return orchestrator


@pytest.fixture
def manager(
    registry: PersonaRegistry, mock_orchestrator: Mock, emitter: RecordingEmitter
) -> SessionManager:
    return SessionManager(
        "conn1",
        registry,
        mock_orchestrator,
        emitter,
        reply_delay_seconds=0,
    )


class TestJoin:
    """join tests."""

    async def test_emits_persona_joined_then_greeting(
        self, manager: SessionManager, emitter: RecordingEmitter, persona: Persona
    ) -> None:
        await manager.join("einstein")

        assert emitter.types() == [ServerEvent.PERSONA_JOINED, ServerEvent.MESSAGE]
        joined, greeting = emitter.events
        assert joined.payload["persona"] == persona.to_summary()
        assert joined.payload["sessionId"].startswith("conn1-einstein-")
        assert greeting.payload["content"] == persona.greeting
        assert greeting.payload["sender"] == "ai"
        assert greeting.payload["persona"] == persona.name

    @pytest.mark.parametrize("persona_id", ["einstein", "shakespeare"])
    async def test_greeting_verbatim_for_every_persona(
        self,
        manager: SessionManager,
        emitter: RecordingEmitter,
        registry: PersonaRegistry,
        persona_id: str,
    ) -> None:
        await manager.join(persona_id)

        messages = [e for e in emitter.events if e.type is ServerEvent.MESSAGE]
        assert messages[0].payload["content"] == registry.require(persona_id).greeting

    async def test_greeting_not_in_history(self, manager: SessionManager) -> None:
        await manager.join("einstein")

        assert manager.is_active is True
        assert manager.session is not None
        assert manager.session.turns == []

    async def test_unknown_persona(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("nobody")

        assert emitter.types() == [ServerEvent.ERROR]
        assert emitter.events[0].payload == {"message": "Invalid persona"}
        assert manager.is_active is False

    async def test_unknown_persona_keeps_active_session(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("einstein")
        await manager.send("hello")
        await manager.flush()
        session = manager.session
        emitter.clear()

        await manager.join("nobody")

        assert emitter.types() == [ServerEvent.ERROR]
        assert manager.session is session
        assert session is not None and len(session.turns) == 2

    async def test_rejoin_same_persona_creates_new_session(
        self, manager: SessionManager
    ) -> None:
        await manager.join("einstein")
        await manager.send("hello")
        first = manager.session

        await manager.join("einstein")

        assert manager.session is not first
        assert manager.session is not None
        assert first is not None
        assert manager.session.id != first.id
        assert manager.session.turns == []


class TestSend:
    """send tests."""

    async def test_emission_order(
        self,
        manager: SessionManager,
        emitter: RecordingEmitter,
        persona: Persona,
    ) -> None:
        await manager.join("einstein")
        emitter.clear()

        await manager.send("hello")
        await manager.flush()

        assert emitter.types() == [
            ServerEvent.MESSAGE,
            ServerEvent.TYPING,
            ServerEvent.TYPING,
            ServerEvent.MESSAGE,
        ]
        user_message, typing_on, typing_off, reply = emitter.events
        assert user_message.payload["content"] == "hello"
        assert user_message.payload["sender"] == "user"
        assert typing_on.payload == {"isTyping": True, "persona": persona.name}
        assert typing_off.payload == {"isTyping": False}
        assert reply.payload["content"] == "E equals mc squared."
        assert reply.payload["sender"] == "ai"
        assert reply.payload["persona"] == persona.name

    async def test_message_ids_increase(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("einstein")
        await manager.send("hello")
        await manager.flush()

        ids = [e.payload["id"] for e in emitter.events if e.type is ServerEvent.MESSAGE]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    async def test_history_accumulates(
        self, manager: SessionManager, mock_orchestrator: Mock, persona: Persona
    ) -> None:
        await manager.join("einstein")
        await manager.send("first")
        await manager.send("second")

        assert manager.session is not None
        assert manager.session.turns == [
            Turn.user("first"),
            Turn.assistant("E equals mc squared."),
            Turn.user("second"),
            Turn.assistant("E equals mc squared."),
        ]
        last_call = mock_orchestrator.generate.await_args
        assert last_call.args == (
            (
                Turn.user("first"),
                Turn.assistant("E equals mc squared."),
                Turn.user("second"),
            ),
            persona,
        )

    async def test_send_while_idle(
        self,
        manager: SessionManager,
        emitter: RecordingEmitter,
        mock_orchestrator: Mock,
    ) -> None:
        await manager.send("hello")

        assert emitter.types() == [ServerEvent.ERROR]
        assert emitter.events[0].payload["message"] == "No active persona session"
        mock_orchestrator.generate.assert_not_awaited()
        assert manager.is_active is False

    @pytest.mark.parametrize("content", ["", "   ", None, 42])
    async def test_invalid_content(
        self,
        manager: SessionManager,
        emitter: RecordingEmitter,
        mock_orchestrator: Mock,
        content: object,
    ) -> None:
        await manager.join("einstein")
        emitter.clear()

        await manager.send(content)

        assert emitter.types() == [ServerEvent.ERROR]
        mock_orchestrator.generate.assert_not_awaited()
        assert manager.session is not None and manager.session.turns == []

    async def test_message_too_long(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        manager = SessionManager(
            "conn1",
            registry,
            mock_orchestrator,
            emitter,
            reply_delay_seconds=0,
            max_message_length=5,
        )
        await manager.join("einstein")
        emitter.clear()

        await manager.send("too long")

        assert emitter.types() == [ServerEvent.ERROR]
        assert "too long" in emitter.events[0].payload["message"]
        mock_orchestrator.generate.assert_not_awaited()

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (ConfigurationError("bad key"), "API key issue. Please check your configuration."),
            (CapacityError("quota"), "API quota or billing issue. Please check your account."),
            (ProviderConnectionError("timeout"), "Network connection issue. Please try again."),
            (
                GenerationError("boom"),
                "Sorry, I encountered an error while processing your message.",
            ),
            (
                RuntimeError("unexpected"),
                "Sorry, I encountered an error while processing your message.",
            ),
        ],
    )
    async def test_generation_failure(
        self,
        manager: SessionManager,
        emitter: RecordingEmitter,
        mock_orchestrator: Mock,
        error: Exception,
        expected: str,
    ) -> None:
        mock_orchestrator.generate.side_effect = error
        await manager.join("einstein")
        emitter.clear()

        await manager.send("hello")
        await manager.flush()

        assert emitter.types() == [
            ServerEvent.MESSAGE,
            ServerEvent.TYPING,
            ServerEvent.TYPING,
            ServerEvent.ERROR,
        ]
        assert emitter.events[2].payload == {"isTyping": False}
        assert emitter.events[3].payload == {"message": expected}
        assert manager.session is not None
        assert [t.role for t in manager.session.turns] == [Role.USER]

    async def test_error_details_exposed_when_enabled(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        mock_orchestrator.generate.side_effect = GenerationError("upstream 502")
        manager = SessionManager(
            "conn1",
            registry,
            mock_orchestrator,
            emitter,
            reply_delay_seconds=0,
            expose_error_details=True,
        )
        await manager.join("einstein")

        await manager.send("hello")

        assert emitter.events[-1].payload == {
            "message": "Sorry, I encountered an error while processing your message.",
            "details": "upstream 502",
        }

    async def test_reply_is_delayed(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        manager = SessionManager(
            "conn1", registry, mock_orchestrator, emitter, reply_delay_seconds=0.05
        )
        await manager.join("einstein")
        emitter.clear()

        await manager.send("hello")
        assert emitter.types()[-1] is ServerEvent.TYPING

        await asyncio.sleep(0.1)
        assert emitter.types()[-1] is ServerEvent.MESSAGE


class TestSessionTeardown:
    """clear / disconnect / switch tests."""

    async def test_clear(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("einstein")
        await manager.send("hello")
        session = manager.session
        emitter.clear()

        await manager.clear()

        assert emitter.types() == [ServerEvent.CHAT_CLEARED]
        assert emitter.events[0].payload == {}
        assert manager.is_active is False
        assert manager.session is None
        assert session is not None

    async def test_send_after_clear_is_idle_error(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("einstein")
        await manager.clear()
        emitter.clear()

        await manager.send("hello")

        assert emitter.types() == [ServerEvent.ERROR]

    async def test_disconnect_emits_nothing(
        self, manager: SessionManager, emitter: RecordingEmitter
    ) -> None:
        await manager.join("einstein")
        emitter.clear()

        await manager.disconnect()

        assert emitter.events == []
        assert manager.is_active is False

    async def test_clear_during_delay_cancels_reply(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        manager = SessionManager(
            "conn1", registry, mock_orchestrator, emitter, reply_delay_seconds=0.05
        )
        await manager.join("einstein")
        await manager.send("hello")
        emitter.clear()

        await manager.clear()
        await asyncio.sleep(0.1)

        assert emitter.types() == [ServerEvent.CHAT_CLEARED]

    async def test_disconnect_during_delay_cancels_reply(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        manager = SessionManager(
            "conn1", registry, mock_orchestrator, emitter, reply_delay_seconds=0.05
        )
        await manager.join("einstein")
        await manager.send("hello")
        emitter.clear()

        await manager.disconnect()
        await asyncio.sleep(0.1)

        assert emitter.events == []

    async def test_switch_persona_isolates_history(
        self,
        manager: SessionManager,
        mock_orchestrator: Mock,
        other_persona: Persona,
    ) -> None:
        await manager.join("einstein")
        await manager.send("x")

        await manager.join("shakespeare")
        await manager.send("y")

        turns, persona = mock_orchestrator.generate.await_args.args
        assert persona is other_persona
        assert turns == (Turn.user("y"),)

    async def test_reply_dropped_when_session_switched_mid_generation(
        self,
        manager: SessionManager,
        mock_orchestrator: Mock,
        emitter: RecordingEmitter,
    ) -> None:
        release = asyncio.Event()

        async def slow_generate(turns: tuple[Turn, ...], persona: Persona) -> str:
            await release.wait()
            return "late reply"

        mock_orchestrator.generate.side_effect = slow_generate
        await manager.join("einstein")
        send_task = asyncio.create_task(manager.send("x"))
        await asyncio.sleep(0)

        await manager.join("shakespeare")
        release.set()
        await send_task
        await manager.flush()

        contents = [
            e.payload["content"] for e in emitter.events if e.type is ServerEvent.MESSAGE
        ]
        assert "late reply" not in contents
        assert manager.session is not None
        assert manager.session.turns == []
        assert emitter.events[-1].payload == {"isTyping": False}


    async def test_join_before_generation_skips_call(
        self,
        registry: PersonaRegistry,
        mock_orchestrator: Mock,
    ) -> None:
        class SwitchingEmitter(RecordingEmitter):
            """Joins another persona as soon as typing starts."""

            manager: SessionManager

            async def emit(self, event: OutboundEvent) -> None:
                await super().emit(event)
                if event.type is ServerEvent.TYPING and event.payload["isTyping"]:
                    await self.manager.join("shakespeare")

        emitter = SwitchingEmitter()
        manager = SessionManager(
            "conn1", registry, mock_orchestrator, emitter, reply_delay_seconds=0
        )
        emitter.manager = manager
        await manager.join("einstein")

        await manager.send("hello")

        mock_orchestrator.generate.assert_not_awaited()
        assert manager.session is not None
        assert manager.session.persona.id == "shakespeare"
        assert manager.session.turns == []
        assert emitter.events[-1].payload == {"isTyping": False}


class TestFallbackScenario:
    """End-to-end behaviour with no credentials configured."""

    async def test_reply_ends_with_disclaimer(
        self,
        registry: PersonaRegistry,
        emitter: RecordingEmitter,
        make_adapter: Callable[..., Mock],
    ) -> None:
        orchestrator = LLMOrchestrator(
            adapters={
                ProviderId.OPENAI: make_adapter(ProviderId.OPENAI, configured=False),
                ProviderId.GEMINI: make_adapter(ProviderId.GEMINI, configured=False),
            },
            fallback=FallbackResponder(),
            default_provider=ProviderId.OPENAI,
        )
        manager = SessionManager(
            "conn1", registry, orchestrator, emitter, reply_delay_seconds=0
        )
        await manager.join("shakespeare")

        await manager.send("To be or not to be?")
        await manager.flush()

        reply = emitter.events[-1]
        assert reply.type is ServerEvent.MESSAGE
        assert reply.payload["content"].endswith(FALLBACK_DISCLAIMER)


class TestUserSafeMessage:
    """user_safe_message tests."""

    def test_validation_error_text_is_kept(self) -> None:
        error = NoActiveSessionError("No active persona session")
        assert user_safe_message(error) == "No active persona session"

    def test_raw_text_is_hidden(self) -> None:
        error = GenerationError("secret upstream detail")
        assert "secret" not in user_safe_message(error)
