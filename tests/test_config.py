import logging

from shipmates.config import (
    CLIENT_SUBPROTOCOL,
    DEFAULT_CLIENT_PATH,
    DEFAULT_HOST,
    DEFAULT_PROTOCOL,
    SERVER_WS_DEFAULT_HOST,
    WsConfig,
)


def test_validate_and_fill_sets_defaults():
    cfg = WsConfig()
    cfg.validate_and_fill()
    assert cfg.protocol == DEFAULT_PROTOCOL == "ws"
    assert cfg.host == DEFAULT_HOST == SERVER_WS_DEFAULT_HOST
    assert cfg.client_path == DEFAULT_CLIENT_PATH == "client"


def test_validate_and_fill_keeps_given_values():
    cfg = WsConfig(protocol="wss", host="example.com:9000", client_path="play")
    cfg.validate_and_fill()
    assert cfg == WsConfig("wss", "example.com:9000", "play")


def test_validate_and_fill_warns_for_each_default(caplog):
    with caplog.at_level(logging.WARNING, logger="shipmates.config"):
        WsConfig(protocol="wss").validate_and_fill()
    messages = [r.getMessage() for r in caplog.records]
    assert any("default host" in m for m in messages)
    assert any("default client path" in m for m in messages)
    assert not any("default protocol" in m for m in messages)


def test_url_joins_parts():
    cfg = WsConfig(protocol="wss", host="example.com", client_path="play")
    assert cfg.url() == "wss://example.com/play"


def test_default_url():
    cfg = WsConfig()
    cfg.validate_and_fill()
    assert cfg.url() == f"ws://{SERVER_WS_DEFAULT_HOST}/{CLIENT_SUBPROTOCOL}"


def test_from_env_reads_variables():
    cfg = WsConfig.from_env(
        {
            "CLIENT_WS_PROTOCOL": "wss",
            "CLIENT_WS_HOST": "example.com:8080",
            "CLIENT_WS_PATH": "game",
        }
    )
    assert cfg.url() == "wss://example.com:8080/game"


def test_from_env_empty_uses_defaults():
    cfg = WsConfig.from_env({"CLIENT_WS_HOST": ""})
    assert cfg == WsConfig(DEFAULT_PROTOCOL, DEFAULT_HOST, DEFAULT_CLIENT_PATH)