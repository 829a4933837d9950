"""Events exchanged with chat clients."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ClientEvent(Enum):
    """Events sent by the client."""

    JOIN_PERSONA = "join-persona"
    SEND_MESSAGE = "send-message"
    CLEAR_CHAT = "clear-chat"


class ServerEvent(Enum):
    """Events sent to the client."""

    PERSONA_JOINED = "persona-joined"
    MESSAGE = "message"
    TYPING = "typing"
    ERROR = "error"
    CHAT_CLEARED = "chat-cleared"


class Sender(Enum):
    """Author of a chat message as shown to the client."""

    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class OutboundEvent:
    """Event to deliver to a single connection.

    Attributes:
        type: Event type.
        payload: Event-specific data.
        created_at: Event creation time.
    """

    type: ServerEvent
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_frame(self) -> dict[str, Any]:
        """Wire representation: ``{"event": name, "data": payload}``."""
        return {"event": self.type.value, "data": self.payload}

    @classmethod
    def error(cls, message: str, details: str | None = None) -> "OutboundEvent":
        payload: dict[str, Any] = {"message": message}
        if details is not None:
            payload["details"] = details
        return cls(type=ServerEvent.ERROR, payload=payload)

    @classmethod
    def typing(cls, is_typing: bool, persona: str | None = None) -> "OutboundEvent":
        payload: dict[str, Any] = {"isTyping": is_typing}
        if persona is not None:
            payload["persona"] = persona
        return cls(type=ServerEvent.TYPING, payload=payload)

    @classmethod
    def chat_message(
        cls,
        message_id: int,
        content: str,
        sender: Sender,
        timestamp: datetime,
        persona: str | None = None,
    ) -> "OutboundEvent":
        payload: dict[str, Any] = {
            "id": message_id,
            "content": content,
            "sender": sender.value,
            "timestamp": timestamp.isoformat(),
        }
        if persona is not None:
            payload["persona"] = persona
        return cls(type=ServerEvent.MESSAGE, payload=payload)
