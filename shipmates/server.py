"""The game server: tracks every player and answers client updates."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import threading
from dataclasses import replace

import websockets
from websockets.exceptions import ConnectionClosed

from shipmates.config import (
    CLIENT_SUBPROTOCOL,
    SERVER_WS_DEFAULT_HOST,
    SERVER_WS_LATENCY,
)
from shipmates.messages import MessageError, Msg, PlayerData, ServerUpdate, decode_msg, encode_msg
from shipmates.ratelimit import DEFAULT_BURST, RateLimiter

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008
ABNORMAL_CLOSURE = 1006
# Close codes that mean the client simply went away.
QUIET_CLOSE_CODES = frozenset({1000, 1001, ABNORMAL_CLOSURE})
READ_TIMEOUT = 10.0


class PlayerRegistry:
    """Thread-safe store of every player the server has heard from."""

    def __init__(self) -> None:
        self._players: dict[str, PlayerData] = {}
        self._lock = threading.Lock()

    def update(self, player: PlayerData) -> None:
        """Record the latest state of a player and mark it connected."""
        stored = replace(player, connected=True)
        with self._lock:
            self._players[stored.uuid] = stored

    def mark_disconnected(self, uuid: str) -> None:
        """Flag a known player as no longer connected."""
        with self._lock:
            player = self._players.get(uuid)
            if player is not None:
                player.connected = False

    def snapshot(self) -> dict[str, PlayerData]:
        """Copies of every known player, keyed by uuid."""
        with self._lock:
            return {uuid: replace(player) for uuid, player in self._players.items()}


class ClientServer:
    """Serves one websocket connection per game client."""

    def __init__(
        self,
        registry: PlayerRegistry | None = None,
        *,
        latency: float = SERVER_WS_LATENCY,
        read_timeout: float = READ_TIMEOUT,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.registry = registry if registry is not None else PlayerRegistry()
        self.latency = latency
        self.read_timeout = read_timeout
        self.logger = log or logger

    def handle_message(self, msg: Msg, client_uuid: str) -> tuple[str, Msg | None]:
        """Apply one client message; return the client's uuid and any reply."""
        if msg.ping is not None:
            self.logger.debug("received ping: %s", msg)
        elif msg.client_update is not None:
            self.logger.debug("received client update: %s", msg)
            player = msg.client_update.player
            client_uuid = player.uuid
            self.registry.update(player)
            update = ServerUpdate(status="ok", players=self.registry.snapshot())
            self.logger.debug("responding with server update: %s", update)
            return client_uuid, Msg(server_update=update)
        elif msg.server_update is not None:
            self.logger.debug("received server update: %s", msg)
        else:
            self.logger.debug("received unknown message type: %s", msg)
        return client_uuid, None

    async def _read(self, connection, limiter: RateLimiter) -> Msg:
        await limiter.wait_async()
        return decode_msg(await connection.recv())

    async def handler(self, connection) -> None:
        """Serve one client connection until it closes or fails."""
        subprotocol = connection.subprotocol or ""
        if subprotocol != CLIENT_SUBPROTOCOL:
            await connection.close(
                code=POLICY_VIOLATION,
                reason=f"expected subprotocol {CLIENT_SUBPROTOCOL!r} but got {subprotocol!r}",
            )
            return

        limiter = RateLimiter(self.latency, DEFAULT_BURST)
        client_uuid = ""
        try:
            while True:
                msg = await asyncio.wait_for(
                    self._read(connection, limiter), self.read_timeout
                )
                client_uuid, reply = self.handle_message(msg, client_uuid)
                if reply is not None:
                    await asyncio.wait_for(
                        connection.send(encode_msg(reply)), self.read_timeout
                    )
        except ConnectionClosed as exc:
            code = exc.rcvd.code if exc.rcvd is not None else ABNORMAL_CLOSURE
            if code in QUIET_CLOSE_CODES:
                self.logger.debug("received client disconnection: %s", exc)
            else:
                self.logger.error("failed to handle client message: %s", exc)
        except (asyncio.TimeoutError, MessageError) as exc:
            self.logger.error("failed to handle client message: %r", exc)
        finally:
            if client_uuid:
                self.logger.info("client disconnected: %s", client_uuid)
                self.registry.mark_disconnected(client_uuid)


def _split_host(host: str) -> tuple[str | None, int]:
    name, sep, port = host.rpartition(":")
    if not sep:
        raise ValueError(f"host {host!r} has no port")
    name = name.strip("[]")
    try:
        number = int(port)
    except ValueError as exc:
        raise ValueError(f"host {host!r} has an invalid port") from exc
    return (name or None), number


async def serve(
    host: str = SERVER_WS_DEFAULT_HOST,
    registry: PlayerRegistry | None = None,
) -> None:
    """Serve game clients on host ("name:port") until cancelled."""
    name, port = _split_host(host)
    server = ClientServer(
        registry,
        log=logging.LoggerAdapter(logger, {"module": "ws-server", "host": host}),
    )
    logger.info("running tcp server using: %s", host)
    async with websockets.serve(
        server.handler, name, port, subprotocols=[CLIENT_SUBPROTOCOL]
    ) as ws_server:
        bound = next(iter(ws_server.sockets)).getsockname()[1]
        logger.debug("listening on: http://%s:%s", name or "", bound)
        await asyncio.Future()


def main(argv: list[str] | None = None) -> int:
    """Run the game server until interrupted."""
    parser = argparse.ArgumentParser(
        prog="shipmates-server",
        description="Run the multiplayer game server; the address comes from $SERVER_WS_HOST.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG)

    host = os.environ.get("SERVER_WS_HOST", "")
    if not host:
        logger.warning(
            "missing $SERVER_WS_HOST, using default: %s", SERVER_WS_DEFAULT_HOST
        )
        host = SERVER_WS_DEFAULT_HOST

    try:
        asyncio.run(serve(host))
    except KeyboardInterrupt:
        logger.info("terminating server, SIG: interrupt")
    except (OSError, ValueError) as exc:
        logger.error("failure serving: %s", exc)
        return 1
    return 0