"""The game loop pieces: updating, drawing and shutting down."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache

import pygame

from shipmates.client import WsClient, WsClientError
from shipmates.config import WINDOW_HEIGHT, WINDOW_WIDTH, WORLD_SCALE
from shipmates.controls import Input
from shipmates.entities import Entity, Player
from shipmates.state import GameState

_log = logging.getLogger(__name__)

SERVER_STATUS_SIZE = 8
STATUS_UP_COLOR = (0, 0xFF, 0, 0xFF)
STATUS_DOWN_COLOR = (0xFF, 0, 0, 0xFF)
DEBUG_TEXT_COLOR = (0xFF, 0xFF, 0xFF)
DEBUG_FONT_SIZE = 16


class GameConfigError(Exception):
    """The game was set up incorrectly."""


@lru_cache(maxsize=1)
def _debug_font() -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, DEBUG_FONT_SIZE)


def _format_input(keys: Input) -> str:
    flags = " ".join(
        str(flag).lower() for flag in (keys.left, keys.right, keys.up, keys.down)
    )
    return f"{{[{' '.join(keys.keys)}] {flags}}}"


class Game:
    """Holds the world, the local player and the connection to the server."""

    def __init__(
        self,
        uuid: str = "",
        *,
        multiplayer: bool = False,
        ws_client: WsClient | None = None,
    ) -> None:
        self.state = GameState(uuid=uuid)
        self.multiplayer = multiplayer
        self.ws_client = ws_client
        self.entities: list[Entity] = []
        self.player: Player | None = None
        self.error: BaseException | None = None
        try:
            self.validate()
        except GameConfigError as exc:
            raise GameConfigError(f"game is invalid: {exc}") from exc
        self.logger = logging.LoggerAdapter(_log, {"module": "game", "ID": uuid})

    def validate(self) -> None:
        """Check that the game is ready to run."""
        if not self.state.uuid:
            raise GameConfigError("missing uuid")
        if self.error is not None:
            raise GameConfigError(str(self.error))

    def layout(self, outside_width: int, outside_height: int) -> tuple[int, int]:
        """The logical screen size, whatever the window size."""
        return WINDOW_WIDTH, WINDOW_HEIGHT

    def update(self, pressed: Iterable[str]) -> None:
        """Run one frame; once anything has failed, every call re-raises it."""
        if self.error is not None:
            raise self.error
        self.state.advance_frame()
        try:
            self.state.input.update(pressed)
            for entity in self.entities:
                entity.update()
        except Exception as exc:
            self.error = exc
            raise

    def shutdown(self, msg: str) -> None:
        """Close the connection and stop the game, remembering msg as the reason."""
        if self.ws_client is not None:
            try:
                self.ws_client.close(msg)
            except WsClientError as exc:
                self.logger.debug("closing connection failed: %s", exc)
        self.error = RuntimeError(msg)
        self.state.running = False
        self.logger.info("goodbye!")

    def _server_up(self) -> bool:
        return self.ws_client is not None and self.ws_client.is_connected()

    def debug_text(self, fps: float) -> str:
        """The overlay text describing the game's state."""
        status = "up" if self._server_up() else "down"
        return (
            f"fps: {round(fps)}"
            f"\n input: {_format_input(self.state.input)}"
            f"\nserver_status: {status}"
            f"\nserver_roundtrips: {self.state.roundtrips}"
            f"\n connected_players: {self.state.connected_players}"
            f"\n current_frame: {self.state.frame}"
            f"\n num_entities: {len(self.entities)}"
        )

    def draw(self, screen: pygame.Surface, fps: float) -> None:
        """Render the world and the overlay, scaled up, onto the screen."""
        target = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT))

        font = _debug_font()
        line_height = font.get_linesize()
        for row, line in enumerate(self.debug_text(fps).split("\n")):
            target.blit(font.render(line, True, DEBUG_TEXT_COLOR), (0, row * line_height))

        color = STATUS_UP_COLOR if self._server_up() else STATUS_DOWN_COLOR
        target.fill(color, pygame.Rect(0, 0, SERVER_STATUS_SIZE, SERVER_STATUS_SIZE))

        for entity in self.entities:
            entity.draw(target)

        scaled = pygame.transform.scale(
            target, (WINDOW_WIDTH * WORLD_SCALE, WINDOW_HEIGHT * WORLD_SCALE)
        )
        screen.blit(scaled, (0, 0))