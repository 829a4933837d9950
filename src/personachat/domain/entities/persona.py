"""Persona entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FewShotExample:
    """A sample exchange used to show the model how the persona talks.

    Attributes:
        user: What the user says.
        assistant: How the persona answers.
    """

    user: str
    assistant: str


@dataclass(frozen=True)
class Persona:
    """Character configuration driving prompt framing and display identity.

    Personas are loaded once at start-up and shared read-only by every
    session.

    Attributes:
        id: Unique key used by clients to join the persona.
        name: Display name, also used to address the persona in prompts.
        avatar: Avatar image URL.
        greeting: First message shown after joining.
        system_prompt: System-level instruction for the model.
        background: Background facts appended to the system prompt.
        examples: Optional few-shot example exchanges.
        fallback_lines: Canned replies used when no provider is configured.
        title: Optional short description shown by clients.
        bio: Optional longer description shown by clients.
    """

    id: str
    name: str
    avatar: str
    greeting: str
    system_prompt: str
    background: tuple[str, ...]
    examples: tuple[FewShotExample, ...] = ()
    fallback_lines: tuple[str, ...] = ()
    title: str | None = None
    bio: str | None = None

    def to_summary(self) -> dict[str, Any]:
        """Public display metadata sent to clients."""
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "greeting": self.greeting,
        }
