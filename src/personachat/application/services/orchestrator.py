"""LLM orchestrator: provider selection, dispatch and failure policy."""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from personachat.application.services.fallback import FallbackResponder
from personachat.domain.entities import Persona, ProviderId, Turn, latest_user_text
from personachat.domain.exceptions import (
    CapacityError,
    ConfigurationError,
    GenerationError,
    ProviderConnectionError,
    UnknownProviderError,
)
from personachat.domain.services import ProviderAdapter
from personachat.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMQuotaError,
)

logger = logging.getLogger(__name__)


class LLMOrchestrator:
    """Dispatches generation requests to the selected provider.

    One instance is shared by every session in the process and owns the
    provider selection. Each request makes at most one attempt.
    """

    def __init__(
        self,
        adapters: Mapping[ProviderId, ProviderAdapter],
        fallback: FallbackResponder,
        default_provider: ProviderId,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            adapters: One adapter per known provider.
            fallback: Responder used when no provider has credentials.
            default_provider: Initially selected provider.

        Raises:
            ValueError: An adapter is missing or does not match its key.
        """
        missing = [p.value for p in ProviderId if p not in adapters]
        if missing:
            raise ValueError(f"No adapter for providers: {missing}")
        for provider, adapter in adapters.items():
            if adapter.provider_id is not provider:
                raise ValueError(
                    f"Adapter for {adapter.provider_id.value} registered as "
                    f"{provider.value}"
                )

        self._adapters = dict(adapters)
        self._fallback = fallback
        self._provider = default_provider

    def get_provider(self) -> ProviderId:
        return self._provider

    def set_provider(self, identifier: str | ProviderId) -> bool:
        """Select the provider used by subsequent requests.

        Returns:
            True if the identifier is known; False (selection unchanged)
            otherwise.
        """
        try:
            provider = ProviderId.require(identifier)
        except UnknownProviderError as e:
            logger.warning("Rejected provider change: %s", e)
            return False
        self._provider = provider
        logger.info("LLM provider set to %s", provider.value)
        return True

    def adapter(self, provider: ProviderId) -> ProviderAdapter:
        return self._adapters[provider]

    def has_credentials(self) -> bool:
        """Check if any provider has a credential configured."""
        return any(adapter.is_configured for adapter in self._adapters.values())

    async def generate(self, turns: Sequence[Turn], persona: Persona) -> str:
        """Generate the persona's reply with the selected provider.

        Args:
            turns: Conversation so far, ending with the latest user turn.
            persona: Persona to answer as.

        Returns:
            Non-empty reply text, or a fallback reply when no provider
            has credentials.

        Raises:
            ConfigurationError: Credential missing or rejected.
            CapacityError: Quota or billing problem.
            ProviderConnectionError: Network failure or timeout.
            GenerationError: Any other provider failure.
        """
        # Read the selection once so a concurrent set_provider cannot
        # split this request across providers.
        provider = self._provider

        if not self.has_credentials():
            return self._fallback.respond(latest_user_text(turns), persona)

        adapter = self._adapters[provider]
        logger.info(
            "Generating response with %s for persona: %s (history length: %d)",
            provider.value,
            persona.name,
            len(turns),
        )

        try:
            return await adapter.generate(turns, persona)
        except LLMAuthenticationError as e:
            logger.error("Authentication error with %s: %s", provider.value, e)
            raise ConfigurationError(
                f"API key issue with {provider.value}. "
                "Please check your configuration."
            ) from e
        except LLMQuotaError as e:
            logger.error("Quota or billing error with %s: %s", provider.value, e)
            raise CapacityError(
                f"Quota or billing issue with {provider.value}. "
                "Please check your account."
            ) from e
        except LLMConnectionError as e:
            logger.error("Connection error with %s: %s", provider.value, e)
            raise ProviderConnectionError(str(e)) from e
        except LLMError as e:
            logger.error("Error with %s: %s", provider.value, e)
            raise GenerationError(str(e)) from e
        except Exception as e:
            logger.exception("Unexpected error with %s", provider.value)
            raise GenerationError(str(e)) from e

    async def test_connections(self) -> dict[str, bool]:
        """Probe every provider that has credentials.

        Providers without credentials are reported unavailable without
        a call. Probe failures are logged, never raised.

        Returns:
            Mapping of provider id to availability.
        """
        logger.info("Testing API connections...")
        providers = list(self._adapters)
        results = await asyncio.gather(
            *(self._probe(self._adapters[provider]) for provider in providers)
        )
        connections = {
            provider.value: ok for provider, ok in zip(providers, results, strict=True)
        }
        logger.info("Connection test results: %s", connections)
        return connections

    async def _probe(self, adapter: ProviderAdapter) -> bool:
        name = adapter.provider_id.value
        if not adapter.is_configured:
            logger.warning("%s API key not found", name)
            return False
        try:
            await adapter.probe()
        except LLMError as e:
            logger.error("%s connection failed: %s", name, e)
            return False
        except Exception:
            logger.exception("%s connection test failed unexpectedly", name)
            return False
        logger.info("%s connection successful", name)
        return True
