"""A websocket client that talks to the game server."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import ClientConnection
from websockets.sync.client import connect as ws_connect

from shipmates.config import CLIENT_SUBPROTOCOL, CLIENT_WS_LATENCY, WsConfig
from shipmates.messages import MessageError, Msg, decode_msg, encode_msg
from shipmates.ratelimit import DEFAULT_BURST, RateLimiter

_log = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000


class WsClientError(Exception):
    """A websocket operation failed."""


class WsClient:
    """Holds one websocket connection to the game server."""

    def __init__(
        self,
        config: WsConfig | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        rate_limiter: RateLimiter | None = None,
        open_timeout: float = 60.0,
        ping_timeout: float = 10.0,
    ) -> None:
        if config is None:
            config = WsConfig.from_env(environ)
        else:
            config.validate_and_fill()
        self.config = config
        self.open_timeout = open_timeout
        self.ping_timeout = ping_timeout
        self.rate_limiter = rate_limiter or RateLimiter(CLIENT_WS_LATENCY, DEFAULT_BURST)
        self.logger = logging.LoggerAdapter(
            logger or _log,
            {
                "module": "ws-client",
                "protocol": config.protocol,
                "host": config.host,
                "path": config.client_path,
            },
        )
        self._connection: ClientConnection | None = None

    def url(self) -> str:
        """The websocket URL of the server."""
        return self.config.url()

    def connect(self) -> None:
        """Open a connection to the server."""
        self.logger.debug("connecting to: %s", self.url())
        self.rate_limiter.wait()
        try:
            self._connection = ws_connect(
                self.url(),
                subprotocols=[CLIENT_SUBPROTOCOL],
                open_timeout=self.open_timeout,
            )
        except (OSError, WebSocketException) as exc:
            self._connection = None
            raise WsClientError(f"unable to dial: {exc}") from exc

    def reconnect(self) -> None:
        """Drop the current connection, if any, and open a new one."""
        self.logger.debug("reconnecting to: %s", self.url())
        self.rate_limiter.wait()
        if self._connection is not None:
            try:
                self._connection.close()
            except (OSError, WebSocketException):
                pass
        self.connect()

    def close(self, msg: str) -> None:
        """Close the connection normally, giving msg as the reason."""
        self.logger.debug("closing ws client: %s", msg)
        if self._connection is None:
            raise WsClientError("connection is nil")
        try:
            self._connection.close(code=NORMAL_CLOSURE, reason=msg)
        except (OSError, WebSocketException) as exc:
            raise WsClientError(f"unable to close: {exc}") from exc

    def is_connected(self) -> bool:
        """Whether the server answers a ping."""
        if self._connection is None:
            return False
        try:
            pong = self._connection.ping()
            return pong.wait(self.ping_timeout)
        except (ConnectionClosed, OSError, WebSocketException, RuntimeError):
            return False

    def send(self, msg: Msg) -> None:
        """Send one message to the server."""
        self.logger.debug("sending msg: %s", msg)
        self.rate_limiter.wait()
        if self._connection is None:
            raise WsClientError("connection is nil")
        try:
            self._connection.send(encode_msg(msg))
        except (OSError, WebSocketException) as exc:
            error = WsClientError(f"unable to write: {exc}")
            self.logger.error("%s", error)
            raise error from exc
        self.logger.debug("sent msg: %s", msg)

    def receive(self) -> Msg:
        """Wait for and return the next message from the server."""
        self.logger.debug("receiving msg")
        self.rate_limiter.wait()
        if self._connection is None:
            raise WsClientError("connection is nil")
        try:
            msg = decode_msg(self._connection.recv())
        except (OSError, WebSocketException, MessageError) as exc:
            error = WsClientError(f"unable to read: {exc}")
            self.logger.error("%s", error)
            raise error from exc
        self.logger.debug("received msg: %s", msg)
        return msg