"""LLM-related exceptions.

Each exception keeps the backend's native error message as its text.
"""


class LLMError(Exception):
    """Base exception for LLM-related errors."""


class LLMAuthenticationError(LLMError):
    """Authentication error (missing or invalid API key, etc.)."""


class LLMQuotaError(LLMError):
    """Quota, billing or rate limit exceeded."""


class LLMConnectionError(LLMError):
    """The backend could not be reached or the request timed out."""


_AUTHENTICATION_PATTERNS = ("api key", "authentication")
_QUOTA_PATTERNS = ("quota", "billing")
_CONNECTION_PATTERNS = ("network", "timeout", "timed out")


def classify_error_message(message: str) -> type[LLMError]:
    """Pick the LLMError subclass matching a backend error message.

    Used when the backend raised an exception type that does not tell
    the category by itself.

    Args:
        message: Error message from the backend.

    Returns:
        Exception class to raise.
    """
    lowered = message.lower()

    if any(pattern in lowered for pattern in _AUTHENTICATION_PATTERNS):
        return LLMAuthenticationError

    if any(pattern in lowered for pattern in _QUOTA_PATTERNS):
        return LLMQuotaError

    if any(pattern in lowered for pattern in _CONNECTION_PATTERNS):
        return LLMConnectionError

    return LLMError
