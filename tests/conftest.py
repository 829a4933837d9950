"""Common fixtures."""

from collections.abc import Callable
from unittest.mock import AsyncMock, Mock

import pytest

from personachat.application.services import FallbackResponder, LLMOrchestrator
from personachat.domain.entities import FewShotExample, Persona, ProviderId
from personachat.domain.services import PersonaRegistry


@pytest.fixture
def persona() -> Persona:
    """Create test persona."""
    return Persona(
        id="einstein",
        name="Albert Einstein",
        avatar="https://example.com/einstein.png",
        greeting="Guten Tag! What shall we wonder about today?",
        system_prompt="You are Albert Einstein.",
        background=("born: 1879", "field: physics"),
        examples=(FewShotExample(user="What is time?", assistant="It is relative."),),
        fallback_lines=("Imagination is more important than knowledge.",),
    )


@pytest.fixture
def other_persona() -> Persona:
    """Create a second test persona without examples or fallback lines."""
    return Persona(
        id="shakespeare",
        name="William Shakespeare",
        avatar="https://example.com/shakespeare.png",
        greeting="Good morrow, gentle friend!",
        system_prompt="You are William Shakespeare.",
        background=("born: 1564",),
    )


@pytest.fixture
def registry(persona: Persona, other_persona: Persona) -> PersonaRegistry:
    """Create registry with both test personas."""
    return PersonaRegistry([persona, other_persona])


def _make_adapter(
    provider: ProviderId,
    *,
    configured: bool = True,
    reply: str = "A reply.",
) -> Mock:
    """Create a mock provider adapter."""
    adapter = Mock()
    adapter.provider_id = provider
    adapter.is_configured = configured
    adapter.generate = AsyncMock(return_value=reply)
    adapter.probe = AsyncMock(return_value=None)
    return adapter


@pytest.fixture
def make_adapter() -> Callable[..., Mock]:
    """Factory for mock provider adapters."""
    return _make_adapter


@pytest.fixture
def openai_adapter() -> Mock:
    return _make_adapter(ProviderId.OPENAI, reply="Hello from OpenAI.")


@pytest.fixture
def gemini_adapter() -> Mock:
    return _make_adapter(ProviderId.GEMINI, configured=False, reply="Hello from Gemini.")


@pytest.fixture
def orchestrator(openai_adapter: Mock, gemini_adapter: Mock) -> LLMOrchestrator:
    """Create orchestrator with mock adapters (OpenAI configured)."""
    return LLMOrchestrator(
        adapters={ProviderId.OPENAI: openai_adapter, ProviderId.GEMINI: gemini_adapter},
        fallback=FallbackResponder(),
        default_provider=ProviderId.OPENAI,
    )
