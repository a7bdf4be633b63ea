# shipmates

A small multiplayer game. Each player walks around a boat that gently rocks
back and forth. A websocket server collects every player's position and sends
the whole crew back to each client, so you see your shipmates move.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
shipmates-server
```

The server listens on the `name:port` address in `SERVER_WS_HOST`. When that
is not set, it uses `localhost:8091`. Press Ctrl+C to stop it. The server
accepts only connections that ask for the `client` websocket subprotocol. It
closes any other connection with a policy-violation code.

## Running the game

```
shipmates
```

Move with the arrow keys or W, A, S, D. Escape ends the game. The client then
logs the reason and exits with status 1. Closing the window ends it normally.

The client reads these environment variables:

| Variable             | Meaning                                  | Default          |
|----------------------|------------------------------------------|------------------|
| `CLIENT_MULTIPLAYER` | anything other than `true` plays locally | multiplayer on   |
| `CLIENT_WS_PROTOCOL` | websocket scheme                         | `ws`             |
| `CLIENT_WS_HOST`     | server address                           | `localhost:8091` |
| `CLIENT_WS_PATH`     | path on the server                       | `client`         |

To play locally:

```
CLIENT_MULTIPLAYER=false shipmates
```

### Multiplayer mode

In multiplayer mode a background thread keeps a connection to the server:

- It sends the local player's state, then handles the reply.
- If it cannot connect, it retries, waiting 1, 2 and then 5 seconds between
  attempts.
- After more than three failed sends or receives in a row, it reconnects.

Every other player the server reports is added to the world. A player the
server no longer reports is drawn dimmed.

### The overlay

A small square in the top-left corner is green while the server answers a
ping and red otherwise. Debug text shows:

- the frame rate
- the keys held
- the server status
- the number of completed round trips
- the connected players
- the frame number
- the number of entities

## Using the pieces

The package can also be used as a library:

| Module | What it provides |
|---|---|
| `shipmates.messages` | `Msg`, `Ping`, `ClientUpdate`, `ServerUpdate` and `PlayerData`. `encode_msg` and `decode_msg` convert them to and from the JSON wire form. `decode_msg` raises `MessageError` on bad input. |
| `shipmates.server` | `PlayerRegistry`, a thread-safe store of players. `ClientServer`, whose `handle_message` answers a client update with a server update and whose `handler` serves one connection. `serve(host, registry)`, a coroutine that serves until cancelled. |
| `shipmates.client` | `WsClient`, with `connect`, `reconnect`, `close`, `is_connected`, `send` and `receive`. Failures raise `WsClientError`. |
| `shipmates.config` | `WsConfig` and its `from_env`, `validate_and_fill` and `url` methods, plus the window and latency constants. |
| `shipmates.ratelimit` | `RateLimiter`, a token bucket with `reserve`, `wait` and `wait_async`. |
| `shipmates.geometry` | `rotate_about`, `polygon_vertices` and `polygon_indices`. |
| `shipmates.sprite` | `FrameOpts`, `frame_index` and `frame_rect`, which pick animation frames from a sprite sheet. |
| `shipmates.controls` | `Input`, which turns pressed key names into directions. It raises `EscapePressed` when Escape is held. |
| `shipmates.entities` | `Player`, `NetworkPlayer`, `Boat` and `boat_outline`. |
| `shipmates.game` | `Game` and `GameConfigError`. |
| `shipmates.multiplayer` | `run_multiplayer`, `exchange`, `apply_server_update`, `retry_delay` and `retry_until_success`. |
| `shipmates.app` | `setup_game`, `run`, `multiplayer_enabled`, `new_session_id` and `main`. |

## What it does not do

The package ships no artwork. Unless a sprite sheet surface is passed to
`Player` or `NetworkPlayer`, each player is drawn as a plain white square.

Player names are carried in `PlayerData` but never set or shown.

The server does not check who connects. It keeps players in memory only, and
players that disconnect stay in its list, marked as not connected.