import logging

import pytest

from shipmates.client import WsClientError
from shipmates.entities import NetworkPlayer, Player
from shipmates.game import Game
from shipmates.messages import Msg, PlayerData, ServerUpdate
from shipmates.multiplayer import (
    apply_server_update,
    exchange,
    retry_delay,
    retry_until_success,
    run_multiplayer,
)


class _StopLoop(BaseException):
    """Raised by the fake client to end the otherwise endless session loop."""


class FakeClient:
    def __init__(
        self,
        replies=None,
        connect_failures=0,
        fail_send=False,
        fail_receive=False,
        stop_after=None,
    ):
        self.replies = list(replies or [])
        self.connect_failures = connect_failures
        self.fail_send = fail_send
        self.fail_receive = fail_receive
        self.stop_after = stop_after
        self.send_calls = 0
        self.sent = []
        self.connects = 0
        self.reconnects = 0

    def connect(self):
        self.connects += 1
        if self.connect_failures:
            self.connect_failures -= 1
            raise WsClientError("refused")

    def reconnect(self):
        self.reconnects += 1

    def send(self, msg):
        self.send_calls += 1
        if self.stop_after is not None and self.send_calls > self.stop_after:
            raise _StopLoop()
        if self.fail_send:
            raise WsClientError("unable to write")
        self.sent.append(msg)

    def receive(self):
        if self.fail_receive:
            raise WsClientError("unable to read")
        return self.replies.pop(0) if self.replies else Msg()


def make_game(uuid="me"):
    game = Game(uuid)
    game.player = Player(game.state)
    game.entities.append(game.player)
    return game


def network_players(game):
    return [e for e in game.entities if isinstance(e, NetworkPlayer)]


def test_retry_delay_values():
    assert retry_delay(0) == 1
    assert retry_delay(1) == 2
    assert retry_delay(2) == 5


def test_retry_delay_levels_off():
    assert retry_delay(9) == retry_delay(2)
    assert retry_delay(-3) == retry_delay(0)


def test_retry_until_success_counts_failures_and_sleeps():
    outcomes = [WsClientError("a"), WsClientError("b"), None]
    sleeps = []

    def action():
        outcome = outcomes.pop(0)
        if outcome is not None:
            raise outcome

    failures = retry_until_success(action, logging.getLogger("t"), "boom", sleeps.append)
    assert failures == 2
    assert sleeps == [retry_delay(0), retry_delay(1)]


def test_retry_until_success_logs_once_waits_are_longest(caplog):
    remaining = [4]

    def action():
        if remaining[0]:
            remaining[0] -= 1
            raise WsClientError("down")

    sleeps = []
    with caplog.at_level(logging.ERROR):
        retry_until_success(action, logging.getLogger("t"), "unable to reconnect", sleeps.append)
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 2
    assert all(m.startswith("unable to reconnect") for m in errors)
    assert sleeps[-1] == retry_delay(2)


def test_apply_server_update_adds_remote_players_only():
    game = make_game()
    players = {
        "me": PlayerData(uuid="me", connected=True),
        "other": PlayerData(uuid="other", connected=True, x=3.0),
    }
    added = apply_server_update(game, ServerUpdate(status="ok", players=players))
    assert [p.data.uuid for p in added] == ["other"]
    assert network_players(game) == added
    assert game.state.connected_players is players


def test_apply_server_update_marks_missing_players_disconnected():
    game = make_game()
    apply_server_update(
        game, ServerUpdate(players={"other": PlayerData(uuid="other", connected=True)})
    )
    added = apply_server_update(game, ServerUpdate(players={}))
    assert added == []
    (remote,) = network_players(game)
    assert remote.data.connected is False


def test_apply_server_update_refreshes_existing_player():
    game = make_game()
    apply_server_update(game, ServerUpdate(players={"other": PlayerData(uuid="other")}))
    fresh = PlayerData(uuid="other", x=9.0, connected=True)
    added = apply_server_update(game, ServerUpdate(players={"other": fresh}))
    assert added == []
    (remote,) = network_players(game)
    assert remote.data is fresh
    assert fresh.client_updated is True


def test_exchange_sends_local_player_and_applies_reply():
    game = make_game()
    game.player.x = 12.5
    reply = Msg(server_update=ServerUpdate(players={"other": PlayerData(uuid="other")}))
    client = FakeClient(replies=[reply])
    assert exchange(game, client) == (True, True)
    (sent,) = client.sent
    assert sent.client_update.status == "client-ping"
    assert sent.client_update.player.uuid == "me"
    assert sent.client_update.player.x == 12.5
    assert [p.data.uuid for p in network_players(game)] == ["other"]


def test_exchange_reports_failures():
    game = make_game()
    client = FakeClient(fail_send=True, fail_receive=True)
    assert exchange(game, client) == (False, False)
    assert network_players(game) == []


def test_exchange_requires_local_player():
    game = Game("me")
    with pytest.raises(ValueError):
        exchange(game, FakeClient())


def test_run_multiplayer_counts_roundtrips():
    game = make_game()
    client = FakeClient(stop_after=3)
    with pytest.raises(_StopLoop):
        run_multiplayer(game, client, lambda s: None)
    assert game.ws_client is client
    assert game.state.roundtrips == 3
    assert len(client.sent) == 3


def test_run_multiplayer_retries_initial_connect():
    game = make_game()
    client = FakeClient(connect_failures=2, stop_after=1)
    sleeps = []
    with pytest.raises(_StopLoop):
        run_multiplayer(game, client, sleeps.append)
    assert client.connects == 3
    assert sleeps == [retry_delay(0)]
    assert game.state.roundtrips == 1


def test_run_multiplayer_reconnects_after_repeated_failures():
    game = make_game()
    client = FakeClient(fail_send=True, stop_after=4)
    with pytest.raises(_StopLoop):
        run_multiplayer(game, client, lambda s: None)
    assert client.reconnects == 1
    assert game.state.roundtrips == 1