"""Game state shared between the game loop, entities and networking."""

from __future__ import annotations

from dataclasses import dataclass, field

from shipmates.controls import Input
from shipmates.messages import PlayerData


@dataclass
class GameState:
    """Session identity, frame counter, input and network statistics."""

    uuid: str = ""
    running: bool = False
    frame: int = 0
    input: Input = field(default_factory=Input)
    foo: str = ""
    roundtrips: int = 0
    connected_players: dict[str, PlayerData] = field(default_factory=dict)

    def advance_frame(self) -> int:
        """Move to the next frame and return its number."""
        self.frame += 1
        return self.frame