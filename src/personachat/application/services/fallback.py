"""Canned replies used when no LLM provider is configured."""

import logging
import random

from personachat.domain.entities import Persona

logger = logging.getLogger(__name__)

FALLBACK_DISCLAIMER = (
    "(Note: This is a demo response. "
    "Please configure your API keys for full AI functionality.)"
)

DEFAULT_FALLBACK_LINES: tuple[str, ...] = (
    "I find your question most intriguing! What aspects of this topic "
    "spark your curiosity?",
    "That is a thoughtful question. Everything depends a little on your "
    "perspective. What do you think?",
    "Your question touches upon something quite profound. Tell me more "
    "about what you have in mind.",
)


class FallbackResponder:
    """Picks a persona-flavored canned reply.

    Lines come from the persona's ``fallback_lines`` or, when it has
    none, from the generic set. Never touches the network.
    """

    def __init__(
        self,
        default_lines: tuple[str, ...] = DEFAULT_FALLBACK_LINES,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the responder.

        Args:
            default_lines: Lines for personas without their own.
            rng: Random source (injectable for tests).
        """
        if not default_lines:
            raise ValueError("default_lines must not be empty")
        self._default_lines = default_lines
        self._rng = rng or random.Random()

    def lines_for(self, persona: Persona) -> tuple[str, ...]:
        return persona.fallback_lines or self._default_lines

    def respond(self, last_user_text: str, persona: Persona) -> str:
        """Return a canned reply followed by the demo disclaimer.

        Args:
            last_user_text: Latest user message (only logged).
            persona: Persona to answer as.
        """
        line = self._rng.choice(self.lines_for(persona))
        logger.info(
            "Using fallback response for %s (no API keys configured); "
            "user message length: %d",
            persona.id,
            len(last_user_text),
        )
        return f"{line}\n\n{FALLBACK_DISCLAIMER}"
