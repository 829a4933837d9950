"""Domain services."""

from personachat.domain.services.persona_registry import PersonaRegistry
from personachat.domain.services.protocols import EventEmitter, ProviderAdapter

__all__ = ["EventEmitter", "PersonaRegistry", "ProviderAdapter"]
