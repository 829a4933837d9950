"""Provider adapters.

Both adapters send their requests through LiteLLM; they differ in how
the conversation is shaped for the backend.
"""

import logging
from collections.abc import Sequence

from personachat.domain.entities import Persona, ProviderId, Turn
from personachat.infrastructure.llm.client import LLMClient
from personachat.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
)
from personachat.infrastructure.llm.templates import (
    create_jinja_env,
    render_narrative,
    render_system_instruction,
)

logger = logging.getLogger(__name__)

PROBE_PROMPT = "Hello"
PROBE_MAX_TOKENS = 5


class LiteLLMProviderAdapter:
    """Shared plumbing for LiteLLM-backed provider adapters.

    Subclasses implement ``build_messages`` for their backend.
    """

    display_name = "LLM"

    def __init__(
        self,
        client: LLMClient,
        *,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: LLMClient for this provider.
            debug_llm_messages: If True, log LLM messages at INFO level.
        """
        self._client = client
        self._debug_llm_messages = debug_llm_messages
        self._jinja_env = create_jinja_env()

    @property
    def provider_id(self) -> ProviderId:
        return self._client.provider

    @property
    def is_configured(self) -> bool:
        return self._client.config.is_configured

    def build_messages(
        self, turns: Sequence[Turn], persona: Persona
    ) -> list[dict[str, str]]:
        raise NotImplementedError

    async def generate(self, turns: Sequence[Turn], persona: Persona) -> str:
        """Generate the persona's reply.

        Raises:
            LLMAuthenticationError: No API key is configured.
            LLMError: The backend failed or returned an empty reply.
        """
        self._require_credentials()

        messages = self.build_messages(turns, persona)

        if self._should_log():
            self._log_messages(messages)

        response = (await self._client.complete(messages)).strip()

        if self._should_log():
            self._log_response(response)

        if not response:
            raise LLMError(f"{self.display_name} returned an empty response")

        logger.info(
            "%s response received: %d characters", self.display_name, len(response)
        )
        return response

    async def probe(self) -> None:
        """Send a minimal request to check that the backend answers."""
        self._require_credentials()
        config = self._client.config
        await self._client.complete(
            [{"role": "user", "content": PROBE_PROMPT}],
            model=config.probe_model or config.model,
            max_tokens=PROBE_MAX_TOKENS,
        )

    def _require_credentials(self) -> None:
        if not self.is_configured:
            raise LLMAuthenticationError(
                f"{self.display_name} API key is not configured"
            )

    def _should_log(self) -> bool:
        """Check if logging should occur."""
        return self._debug_llm_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_messages(self, messages: list[dict[str, str]]) -> None:
        """Log LLM request messages."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Request Messages (%s) ===", self.display_name)
        for i, msg in enumerate(messages):
            log_func("[%d] role=%s", i, msg.get("role", "unknown"))
            log_func("    content: %s", msg.get("content", ""))
        log_func("=== End of Messages ===")

    def _log_response(self, response: str) -> None:
        """Log LLM response."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Response (%s) ===", self.display_name)
        log_func("response: %s", response)
        log_func("=== End of Response ===")


class OpenAIProviderAdapter(LiteLLMProviderAdapter):
    """OpenAI chat completions with structured, role-tagged messages."""

    display_name = "OpenAI"

    def build_messages(
        self, turns: Sequence[Turn], persona: Persona
    ) -> list[dict[str, str]]:
        messages = [
            {
                "role": "system",
                "content": render_system_instruction(self._jinja_env, persona),
            }
        ]
        for example in persona.examples:
            messages.append({"role": "user", "content": example.user})
            messages.append({"role": "assistant", "content": example.assistant})
        messages.extend(turn.to_message() for turn in turns)
        return messages


class GeminiProviderAdapter(LiteLLMProviderAdapter):
    """Gemini with the history flattened into a single narrative prompt."""

    display_name = "Gemini"

    def build_messages(
        self, turns: Sequence[Turn], persona: Persona
    ) -> list[dict[str, str]]:
        prompt = render_narrative(self._jinja_env, turns, persona)
        return [{"role": "user", "content": prompt}]


ADAPTER_CLASSES: dict[ProviderId, type[LiteLLMProviderAdapter]] = {
    ProviderId.OPENAI: OpenAIProviderAdapter,
    ProviderId.GEMINI: GeminiProviderAdapter,
}


def create_adapter(
    client: LLMClient, *, debug_llm_messages: bool = False
) -> LiteLLMProviderAdapter:
    """Create the adapter matching the client's provider."""
    adapter_class = ADAPTER_CLASSES[client.provider]
    return adapter_class(client, debug_llm_messages=debug_llm_messages)
