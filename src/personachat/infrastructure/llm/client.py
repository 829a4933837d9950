"""LLM client wrapper."""

import logging
from typing import Any

import litellm
from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    BudgetExceededError,
    RateLimitError,
    Timeout,
)

from personachat.config import ProviderConfig
from personachat.domain.entities import ProviderId
from personachat.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMQuotaError,
    classify_error_message,
)

logger = logging.getLogger(__name__)


def map_llm_exception(e: Exception) -> LLMError:
    """Map a LiteLLM (or transport) exception to an LLMError.

    The exception type decides first; the message text decides for
    everything else. The original message is preserved.

    Args:
        e: Exception raised by LiteLLM.

    Returns:
        Corresponding LLMError.
    """
    message = str(e)

    if isinstance(e, AuthenticationError):
        return LLMAuthenticationError(message)
    if isinstance(e, BudgetExceededError):
        return LLMQuotaError(message)
    # Plain 429s are quota errors only when the provider says so
    if isinstance(e, RateLimitError):
        return classify_error_message(message)(message)
    # Timeout derives from APIConnectionError in some LiteLLM versions
    if isinstance(e, (Timeout, APIConnectionError)):
        error_class = classify_error_message(message)
        if error_class in (LLMAuthenticationError, LLMQuotaError):
            return error_class(message)
        return LLMConnectionError(message)

    return classify_error_message(message)(message)


class LLMClient:
    """LiteLLM wrapper client for one provider.

    Applies the provider's configuration to every request and converts
    failures to LLMError subclasses.
    """

    def __init__(self, provider: ProviderId, config: ProviderConfig) -> None:
        """Initialize the client.

        Args:
            provider: Provider this client talks to.
            config: Provider configuration (model, api_key, temperature, ...).
        """
        self._provider = provider
        self._config = config

    @property
    def provider(self) -> ProviderId:
        return self._provider

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def complete(
        self,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> str:
        """Execute chat completion.

        Args:
            messages: OpenAI-format message list.
                [{"role": "system", "content": "..."}, ...]
            **kwargs: Additional parameters (override config).

        Returns:
            Generated text (may be empty).

        Raises:
            LLMAuthenticationError: Invalid API key.
            LLMQuotaError: Quota or billing limit exceeded.
            LLMConnectionError: Network failure or timeout.
            LLMError: Other API errors.
        """
        params: dict[str, Any] = {
            "model": self._config.model,
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "messages": messages,
        }
        if self._config.api_key:
            params["api_key"] = self._config.api_key
        if self._config.timeout is not None:
            params["timeout"] = self._config.timeout
        params.update(kwargs)

        logger.debug(
            "LLM request: provider=%s model=%s messages=%d",
            self._provider.value,
            params["model"],
            len(messages),
        )

        try:
            response = await litellm.acompletion(**params)
            content = response.choices[0].message.content or ""
        except Exception as e:
            error = map_llm_exception(e)
            if isinstance(error, LLMQuotaError):
                logger.warning("LLM quota exceeded (%s): %s", self._provider.value, e)
            else:
                logger.error("LLM error (%s): %s", self._provider.value, e)
            raise error from e

        logger.debug("LLM response received: %d characters", len(content))
        return content
