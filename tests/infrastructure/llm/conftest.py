"""Common fixtures for LLM infrastructure tests."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from personachat.config import ProviderConfig


@pytest.fixture
def openai_config() -> ProviderConfig:
    """Create configured OpenAI provider config."""
    return ProviderConfig(
        model="gpt-3.5-turbo",
        api_key="sk-test",
        temperature=0.8,
        max_tokens=1000,
    )


@pytest.fixture
def gemini_config() -> ProviderConfig:
    """Create configured Gemini provider config."""
    return ProviderConfig(
        model="gemini/gemini-2.0-flash",
        api_key="gemini-test",
        probe_model="gemini/gemini-1.5-flash",
    )


@pytest.fixture
def make_response() -> Callable[[str | None], MagicMock]:
    """Factory for mock LiteLLM responses."""

    def _make(content: str | None) -> MagicMock:
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        return response

    return _make
