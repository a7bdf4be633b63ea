"""Things that live in the game world: the local player, remote players and the boat."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import IntEnum
from functools import lru_cache

import pygame

from shipmates.config import SCREEN_HEIGHT, SCREEN_WIDTH, WORLD_SCALE
from shipmates.geometry import Point, rotate_about
from shipmates.messages import PlayerData
from shipmates.sprite import FrameOpts, frame_rect
from shipmates.state import GameState

# Layout of the running animation on the sprite sheet.
FRAME_OX = 0
FRAME_OY = 32
FRAME_WIDTH = 32
FRAME_HEIGHT = 32
FRAME_COUNT = 8

PLAYER_SPEED = 2.0
BOAT_SPEED = 2.0

BOAT_WIDTH = 175.0
BOAT_LENGTH = 250.0
BOAT_SIDE_LENGTH = 0.75
BOAT_SIDE_WIDTH = 0.75
BOAT_STERN_WIDTH = 0.85
BOAT_SWAY_SCALE = 0.2
BOAT_SWAY_SPEED = 0.01
BOAT_COLOR = (0xFF, 0xFF, 0xFF)

# Colour multiplier applied to players whose client has gone away.
DISCONNECTED_TINT = (128, 128, 128, 204)


class Direction(IntEnum):
    """Which way a player faces."""

    LEFT = 0
    RIGHT = 1


@lru_cache(maxsize=1)
def _plain_sheet() -> pygame.Surface:
    sheet = pygame.Surface(
        (FRAME_OX + FRAME_WIDTH * FRAME_COUNT, FRAME_OY + FRAME_HEIGHT), pygame.SRCALPHA
    )
    sheet.fill((0xFF, 0xFF, 0xFF, 0xFF))
    return sheet


def _frame_surface(sheet: pygame.Surface, game_frame: int) -> pygame.Surface:
    opts = FrameOpts(
        current_game_frame=game_frame,
        frame_ox=FRAME_OX,
        frame_oy=FRAME_OY,
        frame_width=FRAME_WIDTH,
        frame_height=FRAME_HEIGHT,
        frame_count=FRAME_COUNT,
    )
    return sheet.subsurface(pygame.Rect(frame_rect(opts)))


def _blit_centered(
    surface: pygame.Surface,
    image: pygame.Surface,
    x: float,
    y: float,
    direction: int,
) -> pygame.Rect:
    if direction == Direction.LEFT:
        image = pygame.transform.flip(image, True, False)
    width, height = image.get_size()
    return surface.blit(image, (round(x - width / 2), round(y - height / 2)))


class Entity(ABC):
    """Anything that is updated every frame and drawn onto the world."""

    def __init__(self, state: GameState, x: float = 0.0, y: float = 0.0) -> None:
        self.state = state
        self.x = x
        self.y = y

    @abstractmethod
    def update(self) -> None:
        """Advance the entity by one frame."""

    @abstractmethod
    def draw(self, surface: pygame.Surface):
        """Draw the entity onto the surface."""


class Player(Entity):
    """The locally controlled player."""

    def __init__(self, state: GameState, sheet: pygame.Surface | None = None) -> None:
        super().__init__(state, SCREEN_WIDTH / 2, SCREEN_HEIGHT / 2)
        self.sheet = sheet if sheet is not None else _plain_sheet()
        self.speed = PLAYER_SPEED
        self.dir = Direction.LEFT
        self.dx = 0.0
        self.dy = 0.0

    @property
    def moving(self) -> bool:
        return self.dx != 0 or self.dy != 0

    def update(self) -> None:
        """Move according to the held keys, at constant speed in any direction."""
        keys = self.state.input
        dx = 0.0
        dy = 0.0
        if keys.up:
            dy -= 1
        if keys.down:
            dy += 1
        if keys.left:
            dx -= 1
            self.dir = Direction.LEFT
        if keys.right:
            dx += 1
            self.dir = Direction.RIGHT

        if dx != 0 and dy != 0:
            length = math.hypot(dx, dy)
            dx /= length
            dy /= length

        self.dx = dx
        self.dy = dy
        self.x += self.dx * self.speed
        self.y += self.dy * self.speed

    def draw(self, surface: pygame.Surface) -> pygame.Rect:
        """Draw the current animation frame centred on the player."""
        frame = self.state.frame if self.moving else 0
        image = _frame_surface(self.sheet, frame)
        return _blit_centered(surface, image, self.x, self.y, self.dir)

    def to_player_data(self) -> PlayerData:
        """The player's state as sent to the server."""
        return PlayerData(
            uuid=self.state.uuid,
            x=self.x,
            y=self.y,
            dx=self.dx,
            dy=self.dy,
            dir=int(self.dir),
        )


class NetworkPlayer(Entity):
    """A remote player drawn from the data the server reports."""

    def __init__(
        self,
        state: GameState,
        data: PlayerData,
        sheet: pygame.Surface | None = None,
    ) -> None:
        super().__init__(state)
        self.data = data
        self.sheet = sheet if sheet is not None else _plain_sheet()

    def update(self) -> None:
        """Remote players only change when the server says so."""

    def draw(self, surface: pygame.Surface) -> pygame.Rect:
        """Draw the remote player, dimmed when its client is disconnected."""
        moving = self.data.dx != 0 or self.data.dy != 0
        frame = self.state.frame if moving else 0
        image = _frame_surface(self.sheet, frame)
        if not self.data.connected:
            tinted = pygame.Surface(image.get_size(), pygame.SRCALPHA)
            tinted.blit(image, (0, 0))
            tinted.fill(DISCONNECTED_TINT, special_flags=pygame.BLEND_RGBA_MULT)
            image = tinted
        return _blit_centered(surface, image, self.data.x, self.data.y, self.data.dir)


def boat_outline(x: float, y: float) -> list[Point]:
    """The closed outline of the hull, bow first, around the point (x, y)."""
    width = BOAT_WIDTH
    length = BOAT_LENGTH
    bow_length = length * 0.7
    half_width = width * 0.5
    side_x = width * BOAT_SIDE_WIDTH
    side_y = length * BOAT_SIDE_LENGTH
    stern_x = half_width * BOAT_STERN_WIDTH
    return [
        (x + half_width, y - bow_length),
        (x, y - length),
        (x - half_width, y - bow_length),
        (x - side_x, y),
        (x - side_x, y + side_y),
        (x - stern_x, y + length),
        (x + stern_x, y + length),
        (x + side_x, y + side_y),
        (x + side_x, y),
    ]


class Boat(Entity):
    """The boat the players stand on; it sways gently over time."""

    def __init__(self, state: GameState, player: Player | None = None) -> None:
        super().__init__(state, SCREEN_WIDTH / 2, SCREEN_HEIGHT / 2)
        self.player = player
        self.speed = BOAT_SPEED
        self.dir = Direction.LEFT
        self.dx = 0.0
        self.dy = 0.0

    def update(self) -> None:
        """The boat does not move on its own."""

    def draw(self, surface: pygame.Surface) -> list[Point]:
        """Stroke the swaying hull and return the drawn corner points."""
        sway = math.cos(self.state.frame * BOAT_SWAY_SPEED) * BOAT_SWAY_SCALE
        cx = float(SCREEN_WIDTH // 2)
        cy = float(SCREEN_HEIGHT // 2)
        points = [
            rotate_about((px + cx) / WORLD_SCALE, (py + cy) / WORLD_SCALE, cx, cy, sway)
            for px, py in boat_outline(cx, cy)
        ]
        pygame.draw.aalines(surface, BOAT_COLOR, True, points)
        return points