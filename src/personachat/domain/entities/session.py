"""Chat session entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from personachat.domain.entities.persona import Persona
from personachat.domain.entities.turn import Turn


@dataclass
class Session:
    """Per-connection, in-memory conversation state.

    The greeting sent on join is not part of ``turns``; only turns that
    the model should see are stored.

    Attributes:
        id: Unique per join.
        persona: The persona this session talks to.
        turns: Ordered, append-only conversation history.
        created_at: When the session was created.
    """

    id: str
    persona: Persona
    turns: list[Turn] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def make_id(connection_id: str, persona_id: str, epoch_ms: int) -> str:
        return f"{connection_id}-{persona_id}-{epoch_ms}"

    def add_turn(self, turn: Turn) -> None:
        self.turns.append(turn)

    def history(self) -> tuple[Turn, ...]:
        """Snapshot of the turns so far."""
        return tuple(self.turns)
