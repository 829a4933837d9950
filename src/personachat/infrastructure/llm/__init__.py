"""LLM integration."""

from personachat.infrastructure.llm.client import LLMClient, map_llm_exception
from personachat.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMQuotaError,
)
from personachat.infrastructure.llm.providers import (
    GeminiProviderAdapter,
    LiteLLMProviderAdapter,
    OpenAIProviderAdapter,
    create_adapter,
)

__all__ = [
    "GeminiProviderAdapter",
    "LLMAuthenticationError",
    "LLMClient",
    "LLMConnectionError",
    "LLMError",
    "LLMQuotaError",
    "LiteLLMProviderAdapter",
    "OpenAIProviderAdapter",
    "create_adapter",
    "map_llm_exception",
]
