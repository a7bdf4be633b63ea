"""A small multiplayer boat game: a pygame client and a websocket server sharing player positions."""

__version__ = "0.1.0"