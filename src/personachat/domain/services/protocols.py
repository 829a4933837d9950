"""Domain service protocols."""

from collections.abc import Sequence
from typing import Protocol

from personachat.domain.entities import OutboundEvent, Persona, ProviderId, Turn


class ProviderAdapter(Protocol):
    """Uniform contract over one LLM backend.

    Implementations translate a provider-agnostic conversation into the
    backend's request shape and normalize the reply to plain text.
    """

    @property
    def provider_id(self) -> ProviderId:
        """Identifier of the backend this adapter talks to."""
        ...

    @property
    def is_configured(self) -> bool:
        """Whether a credential for the backend is present."""
        ...

    async def generate(self, turns: Sequence[Turn], persona: Persona) -> str:
        """Generate the persona's reply to the conversation.

        Args:
            turns: Conversation so far, oldest first, ending with the
                latest user turn.
            persona: Persona to answer as.

        Returns:
            Reply text, stripped of surrounding whitespace.

        Raises:
            LLMAuthenticationError: Credential missing or rejected.
            LLMQuotaError: Quota, billing or rate limit exceeded.
            LLMConnectionError: Network failure or timeout.
            LLMError: Any other backend failure.
        """
        ...

    async def probe(self) -> None:
        """Issue a minimal live request; raise LLMError on failure."""
        ...


class EventEmitter(Protocol):
    """Delivers outbound events to one client connection."""

    async def emit(self, event: OutboundEvent) -> None:
        """Send an event.

        Args:
            event: The event to deliver.
        """
        ...
