"""Wire messages exchanged between game clients and the server."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


class MessageError(ValueError):
    """A message could not be decoded."""


def _get(data: dict, key: str, kinds: tuple[type, ...], default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) and bool not in kinds:
        raise MessageError(f"field {key!r} has the wrong type")
    if not isinstance(value, kinds):
        raise MessageError(f"field {key!r} has the wrong type")
    return value


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise MessageError(f"{what} must be an object")
    return value


@dataclass
class PlayerData:
    """The state of one player as it travels over the network."""

    uuid: str = ""
    connected: bool = False
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    dx: float = 0.0
    dy: float = 0.0
    dir: int = 0
    client_updated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "connected": self.connected,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "dx": self.dx,
            "dy": self.dy,
            "dir": self.dir,
            "ClientUpdated": self.client_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> PlayerData:
        data = _object(data, "player")
        number = (int, float)
        return cls(
            uuid=_get(data, "uuid", (str,), ""),
            connected=_get(data, "connected", (bool,), False),
            name=_get(data, "name", (str,), ""),
            x=float(_get(data, "x", number, 0.0)),
            y=float(_get(data, "y", number, 0.0)),
            dx=float(_get(data, "dx", number, 0.0)),
            dy=float(_get(data, "dy", number, 0.0)),
            dir=_get(data, "dir", (int,), 0),
            client_updated=_get(data, "ClientUpdated", (bool,), False),
        )


@dataclass
class Ping:
    """A keep-alive message with no content."""


@dataclass
class ServerUpdate:
    """The server's view of every known player."""

    status: str = ""
    players: dict[str, PlayerData] = field(default_factory=dict)


@dataclass
class ClientUpdate:
    """One client's report of its own player."""

    status: str = ""
    player: PlayerData = field(default_factory=PlayerData)


@dataclass
class Msg:
    """An envelope carrying at most one of each message kind."""

    ping: Ping | None = None
    server_update: ServerUpdate | None = None
    client_update: ClientUpdate | None = None


def encode_msg(msg: Msg) -> str:
    """Serialise a message to its JSON wire form."""
    server_update = None
    if msg.server_update is not None:
        server_update = {
            "status": msg.server_update.status,
            "players": {
                uuid: player.to_dict()
                for uuid, player in msg.server_update.players.items()
            },
        }
    client_update = None
    if msg.client_update is not None:
        client_update = {
            "status": msg.client_update.status,
            "player": msg.client_update.player.to_dict(),
        }
    payload = {
        "ping": {} if msg.ping is not None else None,
        "server_update": server_update,
        "client_update": client_update,
    }
    return json.dumps(payload, separators=(",", ":"))


def _decode_server_update(value: Any) -> ServerUpdate:
    data = _object(value, "server_update")
    players_raw = data.get("players")
    players: dict[str, PlayerData] = {}
    if players_raw is not None:
        for uuid, player in _object(players_raw, "players").items():
            if player is not None:
                players[uuid] = PlayerData.from_dict(player)
    return ServerUpdate(status=_get(data, "status", (str,), ""), players=players)


def _decode_client_update(value: Any) -> ClientUpdate:
    data = _object(value, "client_update")
    player_raw = data.get("player")
    player = PlayerData() if player_raw is None else PlayerData.from_dict(player_raw)
    return ClientUpdate(status=_get(data, "status", (str,), ""), player=player)


def decode_msg(text: str | bytes) -> Msg:
    """Parse a message from its JSON wire form."""
    try:
        payload = json.loads(text)
    except (ValueError, TypeError) as exc:
        raise MessageError(f"invalid message: {exc}") from exc
    if payload is None:
        return Msg()
    payload = _object(payload, "message")

    msg = Msg()
    if payload.get("ping") is not None:
        _object(payload["ping"], "ping")
        msg.ping = Ping()
    if payload.get("server_update") is not None:
        msg.server_update = _decode_server_update(payload["server_update"])
    if payload.get("client_update") is not None:
        msg.client_update = _decode_client_update(payload["client_update"])
    return msg