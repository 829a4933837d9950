"""Domain entities."""

from personachat.domain.entities.event import (
    ClientEvent,
    OutboundEvent,
    Sender,
    ServerEvent,
)
from personachat.domain.entities.persona import FewShotExample, Persona
from personachat.domain.entities.provider import ProviderId
from personachat.domain.entities.session import Session
from personachat.domain.entities.turn import Role, Turn, latest_user_text

__all__ = [
    "ClientEvent",
    "FewShotExample",
    "OutboundEvent",
    "Persona",
    "ProviderId",
    "Role",
    "Sender",
    "ServerEvent",
    "Session",
    "Turn",
    "latest_user_text",
]
