"""Keeping a multiplayer session alive: ping the server, apply what it reports."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Union

import pygame

from shipmates.client import WsClient, WsClientError
from shipmates.entities import NetworkPlayer
from shipmates.game import Game
from shipmates.messages import ClientUpdate, Msg, ServerUpdate

# Attempts past this step all wait as long as this one.
MAX_RETRY_STEP = 2
# Consecutive failures tolerated before the connection is rebuilt.
MAX_CONSECUTIVE_ERRORS = 3
PING_STATUS = "client-ping"

Logger = Union[logging.Logger, logging.LoggerAdapter]


def retry_delay(attempt: int) -> int:
    """Seconds to wait after a failed attempt; grows quadratically, then levels off."""
    step = min(max(attempt, 0), MAX_RETRY_STEP)
    return 1 + step * step


def retry_until_success(
    action: Callable[[], object],
    logger: Logger,
    message: str,
    sleep: Callable[[float], object] = time.sleep,
) -> int:
    """Call action until it stops raising; return how many attempts failed.

    Once the waits have reached their longest, each failure is logged with message.
    """
    failures = 0
    while True:
        try:
            action()
        except Exception as exc:
            step = min(failures, MAX_RETRY_STEP)
            if step == MAX_RETRY_STEP:
                logger.error("%s: %s", message, exc)
            sleep(retry_delay(step))
            failures += 1
        else:
            return failures


def apply_server_update(game: Game, update: ServerUpdate) -> list[NetworkPlayer]:
    """Bring remote players in line with the server; return the newly added ones."""
    players = update.players
    game.state.connected_players = players

    for entity in game.entities:
        if not isinstance(entity, NetworkPlayer):
            continue
        data = players.get(entity.data.uuid)
        if data is not None:
            entity.data = data
            data.client_updated = True
        else:
            entity.data.connected = False

    added: list[NetworkPlayer] = []
    for data in players.values():
        if data.client_updated or data.uuid == game.state.uuid:
            continue
        try:
            remote = NetworkPlayer(game.state, data)
        except pygame.error as exc:
            game.logger.error("error creating network player: %s", exc)
            continue
        game.entities.append(remote)
        added.append(remote)
    return added


def exchange(game: Game, client: WsClient) -> tuple[bool, bool]:
    """Send the local player's state and handle one reply.

    Returns whether the send and the receive each succeeded.
    """
    if game.player is None:
        raise ValueError("the game has no local player")

    sent = True
    outgoing = Msg(
        client_update=ClientUpdate(
            status=PING_STATUS, player=game.player.to_player_data()
        )
    )
    try:
        client.send(outgoing)
    except WsClientError as exc:
        sent = False
        game.logger.error("error sending client update: %s", exc)

    received = True
    try:
        reply = client.receive()
    except WsClientError as exc:
        received = False
        reply = Msg()
        game.logger.error("error receiving server update: %s", exc)

    if reply.ping is not None:
        game.logger.debug("received ping: %s", reply)
    elif reply.client_update is not None:
        game.logger.debug("received client update: %s", reply)
    elif reply.server_update is not None:
        game.logger.debug("received server update: %s", reply)
        apply_server_update(game, reply.server_update)
    else:
        game.logger.debug("received unknown message type: %s", reply)

    return sent, received


def run_multiplayer(
    game: Game,
    client: WsClient | None = None,
    sleep: Callable[[float], object] = time.sleep,
) -> None:
    """Connect to the server and keep exchanging state with it forever."""
    game.logger.info("establishing multiplayer session")
    if client is None:
        client = WsClient(logger=game.logger)
    game.ws_client = client

    try:
        client.connect()
    except Exception:
        retry_until_success(
            client.connect, game.logger, "unable to initialize connection", sleep
        )

    send_errors = 0
    recv_errors = 0
    while True:
        sent, received = exchange(game, client)
        send_errors = 0 if sent else send_errors + 1
        recv_errors = 0 if received else recv_errors + 1

        if send_errors > MAX_CONSECUTIVE_ERRORS or recv_errors > MAX_CONSECUTIVE_ERRORS:
            game.logger.error(
                "too many websocket connection failures, attempting to reconnect"
            )
            retry_until_success(client.reconnect, game.logger, "unable to reconnect", sleep)
            send_errors = 0
            recv_errors = 0

        if send_errors == 0 and recv_errors == 0:
            game.state.roundtrips += 1