import uuid

import pytest

from shipmates.app import main, multiplayer_enabled, new_session_id, setup_game
from shipmates.entities import Boat, Player
from shipmates.game import Game


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, True),
        ({"CLIENT_MULTIPLAYER": ""}, True),
        ({"CLIENT_MULTIPLAYER": "true"}, True),
        ({"CLIENT_MULTIPLAYER": "TRUE"}, True),
        ({"CLIENT_MULTIPLAYER": "false"}, False),
        ({"CLIENT_MULTIPLAYER": "1"}, False),
    ],
)
def test_multiplayer_enabled(environ, expected):
    assert multiplayer_enabled(environ) is expected


def test_multiplayer_enabled_reads_process_environment(monkeypatch):
    monkeypatch.setenv("CLIENT_MULTIPLAYER", "false")
    assert multiplayer_enabled() is False


def test_new_session_id_is_a_uuid():
    session = new_session_id()
    assert str(uuid.UUID(session)) == session


def test_new_session_ids_are_unique():
    ids = {new_session_id() for _ in range(20)}
    assert len(ids) == 20


def test_setup_game_places_boat_then_player():
    game = Game("me")
    player = setup_game(game)
    assert [type(e) for e in game.entities] == [Boat, Player]
    assert game.player is player
    assert game.entities[0].player is player
    assert player.state is game.state


def test_setup_game_player_reports_session_id():
    game = Game("session-1")
    player = setup_game(game)
    assert player.to_player_data().uuid == "session-1"


def test_main_rejects_unknown_arguments():
    with pytest.raises(SystemExit) as info:
        main(["--no-such-flag"])
    assert info.value.code == 2