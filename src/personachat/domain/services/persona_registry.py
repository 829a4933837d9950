"""Persona registry."""

from collections.abc import Iterable, Iterator

from personachat.domain.entities import Persona
from personachat.domain.exceptions import UnknownPersonaError


class PersonaRegistry:
    """Immutable lookup of personas by id.

    Iteration follows the order the personas were registered in.
    """

    def __init__(self, personas: Iterable[Persona]) -> None:
        """Initialize the registry.

        Args:
            personas: Personas to register.

        Raises:
            ValueError: If no persona is given or an id is duplicated.
        """
        self._personas: dict[str, Persona] = {}
        for persona in personas:
            if persona.id in self._personas:
                raise ValueError(f"Duplicate persona id: {persona.id}")
            self._personas[persona.id] = persona
        if not self._personas:
            raise ValueError("At least one persona is required")

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._personas

    def __iter__(self) -> Iterator[Persona]:
        return iter(self._personas.values())

    def __len__(self) -> int:
        return len(self._personas)

    def ids(self) -> list[str]:
        return list(self._personas)

    def get(self, persona_id: str) -> Persona | None:
        return self._personas.get(persona_id)

    def require(self, persona_id: str) -> Persona:
        """Look up a persona.

        Raises:
            UnknownPersonaError: If the id is not registered.
        """
        persona = self._personas.get(persona_id)
        if persona is None:
            raise UnknownPersonaError(persona_id)
        return persona
