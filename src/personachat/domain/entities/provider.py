"""LLM provider identifiers."""

from enum import Enum

from personachat.domain.exceptions import UnknownProviderError


class ProviderId(str, Enum):
    """Known LLM providers.

    The set is closed: adding a provider means adding a member here
    and an adapter for it.
    """

    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: object) -> "ProviderId | None":
        """Return the provider for ``value``, or None if it is not known."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def require(cls, value: object) -> "ProviderId":
        """Return the provider for ``value``.

        Raises:
            UnknownProviderError: ``value`` is not a known provider id.
        """
        provider = cls.parse(value)
        if provider is None:
            raise UnknownProviderError(value)
        return provider
