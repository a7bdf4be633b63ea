"""Keyboard state for the local player."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

LEFT_KEYS = frozenset({"left", "a"})
RIGHT_KEYS = frozenset({"right", "d"})
DOWN_KEYS = frozenset({"down", "s"})
UP_KEYS = frozenset({"up", "w"})
EXIT_KEY = "escape"


class EscapePressed(Exception):
    """The player asked to leave the game."""


@dataclass
class Input:
    """Directions currently held, derived from the pressed key names."""

    keys: list[str] = field(default_factory=list)
    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False

    def reset(self) -> None:
        self.left = False
        self.right = False
        self.up = False
        self.down = False

    def update(self, pressed: Iterable[str]) -> None:
        """Refresh the directions from the names of the keys held down.

        Raises EscapePressed when the escape key is among them.
        """
        self.reset()
        self.keys = sorted({name.lower() for name in pressed})
        held = set(self.keys)
        self.left = not LEFT_KEYS.isdisjoint(held)
        self.right = not RIGHT_KEYS.isdisjoint(held)
        self.down = not DOWN_KEYS.isdisjoint(held)
        self.up = not UP_KEYS.isdisjoint(held)
        if EXIT_KEY in held:
            raise EscapePressed("escape key pressed, exiting game")