"""Conversation turn entity."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Speaker of a turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message in a conversation.

    Attributes:
        role: Who said it.
        content: Message text.
    """

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(role=Role.ASSISTANT, content=content)

    def to_message(self) -> dict[str, str]:
        """Convert to an OpenAI-format message dict."""
        return {"role": self.role.value, "content": self.content}


def latest_user_text(turns: Sequence[Turn]) -> str:
    """Return the content of the most recent user turn, or an empty string."""
    for turn in reversed(turns):
        if turn.role is Role.USER:
            return turn.content
    return ""
