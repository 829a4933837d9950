"""Pydantic models for inbound client payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClientFrame(BaseModel):
    """One WebSocket frame sent by the client."""

    event: str = Field(description="Event name, e.g. 'send-message'")
    data: dict[str, Any] | None = Field(default=None, description="Event payload")


class JoinPersonaPayload(BaseModel):
    """Payload of ``join-persona``."""

    model_config = ConfigDict(populate_by_name=True)

    persona_id: str = Field(alias="personaId", description="Persona to join")


class SendMessagePayload(BaseModel):
    """Payload of ``send-message``."""

    content: str = Field(description="User message text")


class ProviderUpdateRequest(BaseModel):
    """Body of ``POST /api/llm-provider``."""

    provider: str = Field(description="Provider identifier")
