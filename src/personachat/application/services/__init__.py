"""Application services."""

from personachat.application.services.fallback import (
    DEFAULT_FALLBACK_LINES,
    FALLBACK_DISCLAIMER,
    FallbackResponder,
)
from personachat.application.services.orchestrator import LLMOrchestrator
from personachat.application.services.session_manager import (
    SessionManager,
    user_safe_message,
)

__all__ = [
    "DEFAULT_FALLBACK_LINES",
    "FALLBACK_DISCLAIMER",
    "FallbackResponder",
    "LLMOrchestrator",
    "SessionManager",
    "user_safe_message",
]
