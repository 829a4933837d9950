"""Domain exceptions."""


class ChatError(Exception):
    """Base exception for errors reported to a chat session."""


class ValidationError(ChatError):
    """A request was rejected before any state change or network call."""


class UnknownPersonaError(ValidationError):
    """The requested persona is not registered."""

    def __init__(self, persona_id: str) -> None:
        self.persona_id = persona_id
        super().__init__(f"Unknown persona: {persona_id}")


class UnknownProviderError(ValidationError):
    """The requested LLM provider is not one of the known providers."""

    def __init__(self, provider: object) -> None:
        self.provider = provider
        super().__init__(f"Invalid LLM provider: {provider}")


class NoActiveSessionError(ValidationError):
    """A message was sent before any persona was joined."""


class InvalidMessageError(ValidationError):
    """The message content is empty, of the wrong type or too long."""


class ConfigurationError(ChatError):
    """Provider credentials are missing or were rejected.

    Signals a setup defect: never retried and never answered with a
    fallback reply.
    """


class CapacityError(ChatError):
    """The provider refused the request for quota or billing reasons."""


class GenerationError(ChatError):
    """Any other provider failure while at least one credential exists."""


class ProviderConnectionError(GenerationError):
    """The provider could not be reached or timed out."""
