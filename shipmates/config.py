"""Game-wide constants and websocket endpoint configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SERVER_WS_DEFAULT_HOST = "localhost:8091"
# Seconds to wait between serving messages for one client.
SERVER_WS_LATENCY = 0.001

CLIENT_SUBPROTOCOL = "client"
# Seconds to wait between pings to the server.
CLIENT_WS_LATENCY = 0.001

WINDOW_TITLE = "Go Ebiten Multiplayer"

WORLD_SCALE = 2
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
SCREEN_WIDTH = WINDOW_WIDTH // WORLD_SCALE
SCREEN_HEIGHT = WINDOW_HEIGHT // WORLD_SCALE

DEFAULT_PROTOCOL = "ws"
DEFAULT_HOST = SERVER_WS_DEFAULT_HOST
DEFAULT_CLIENT_PATH = "client"

ENV_PROTOCOL = "CLIENT_WS_PROTOCOL"
ENV_HOST = "CLIENT_WS_HOST"
ENV_PATH = "CLIENT_WS_PATH"


@dataclass
class WsConfig:
    """Where the websocket client connects to."""

    protocol: str = ""
    host: str = ""
    client_path: str = ""

    def validate_and_fill(self) -> None:
        """Replace every empty field with its default, warning about each."""
        if not self.protocol:
            logger.warning("using default protocol: %s", DEFAULT_PROTOCOL)
            self.protocol = DEFAULT_PROTOCOL
        if not self.host:
            logger.warning("using default host: %s", DEFAULT_HOST)
            self.host = DEFAULT_HOST
        if not self.client_path:
            logger.warning("using default client path: %s", DEFAULT_CLIENT_PATH)
            self.client_path = DEFAULT_CLIENT_PATH

    def url(self) -> str:
        """The websocket URL built from the configured parts."""
        return f"{self.protocol}://{self.host}/{self.client_path}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> WsConfig:
        """Read the configuration from the environment, filling in defaults."""
        env = os.environ if environ is None else environ
        config = cls(
            protocol=env.get(ENV_PROTOCOL, ""),
            host=env.get(ENV_HOST, ""),
            client_path=env.get(ENV_PATH, ""),
        )
        config.validate_and_fill()
        return config