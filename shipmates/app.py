"""Starting the game client: window, entities, multiplayer and the main loop."""

from __future__ import annotations

import argparse
import logging
import os
import threading
import uuid
from collections.abc import Mapping

import pygame

from shipmates.config import WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH
from shipmates.entities import Boat, Player
from shipmates.game import Game, GameConfigError
from shipmates.multiplayer import run_multiplayer

logger = logging.getLogger(__name__)

ENV_MULTIPLAYER = "CLIENT_MULTIPLAYER"
TARGET_FPS = 60


def multiplayer_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Multiplayer is on unless the environment sets it to something other than true."""
    env = os.environ if environ is None else environ
    value = env.get(ENV_MULTIPLAYER, "")
    return not value or value.lower() == "true"


def new_session_id() -> str:
    """A fresh unique identifier for this session."""
    return str(uuid.uuid4())


def setup_game(game: Game) -> Player:
    """Put the boat and the local player into the world; return the player."""
    boat = Boat(game.state)
    game.entities.append(boat)

    player = Player(game.state)
    game.player = player
    boat.player = player
    game.entities.append(player)
    return player


def _multiplayer_worker(game: Game) -> None:
    try:
        run_multiplayer(game)
    except Exception as exc:
        game.logger.error("multiplayer ended with error, this should not happen: %s", exc)
    else:
        game.logger.error("multiplayer ended without error, this should not happen")


def run(game: Game) -> None:
    """Open the window and run the game loop until the game stops or fails."""
    game.state.running = True
    game.logger.info("preparing game")
    setup_game(game)

    if game.multiplayer:
        game.logger.debug("running in multiplayer mode")
        threading.Thread(
            target=_multiplayer_worker, args=(game,), name="multiplayer", daemon=True
        ).start()
    else:
        game.logger.debug("running in local mode")

    game.logger.debug("starting game")
    pygame.init()
    try:
        screen = pygame.display.set_mode(game.layout(WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        clock = pygame.time.Clock()
        pressed: set[str] = set()
        while game.state.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                if event.type == pygame.KEYDOWN:
                    pressed.add(pygame.key.name(event.key))
                elif event.type == pygame.KEYUP:
                    pressed.discard(pygame.key.name(event.key))
                elif event.type == pygame.WINDOWFOCUSLOST:
                    pressed.clear()
            try:
                game.update(pressed)
            except Exception as exc:
                raise RuntimeError(f"game error: {exc}") from exc
            game.draw(screen, clock.get_fps())
            pygame.display.flip()
            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()


def main(argv: list[str] | None = None) -> int:
    """Run the game client."""
    parser = argparse.ArgumentParser(
        prog="shipmates",
        description="Run the game client; set $CLIENT_MULTIPLAYER=false to play locally.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG)

    try:
        game = Game(new_session_id(), multiplayer=multiplayer_enabled())
    except GameConfigError as exc:
        logger.error("%s", exc)
        return 1

    try:
        run(game)
    except Exception as exc:
        logger.error("%s", exc)
        return 1
    finally:
        if game.state.running:
            game.shutdown("shutting down game")
    return 0