from __future__ import annotations

import pytest

from pyvisitors.config import ConsoleConfig
from pyvisitors.exceptions import VisitorsConfigError


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VISITORS_SERVER_URL", "https://feed.example.com/")
    monkeypatch.setenv("VISITORS_TOKEN", "abc123")
    monkeypatch.setenv("VISITORS_SOCKETIO_PATH", "feed/socket.io")
    monkeypatch.setenv("VISITORS_RECONNECTION", "off")
    monkeypatch.setenv("VISITORS_RECONNECTION_ATTEMPTS", "5")
    monkeypatch.setenv("VISITORS_LOG_PAYLOADS", "yes")
    monkeypatch.setenv("VISITORS_REQUEST_BOOTSTRAP", "off")

    config = ConsoleConfig.from_env()

    assert config.server_url == "https://feed.example.com/"
    assert config.rest_base == "https://feed.example.com"
    assert config.socketio_path == "feed/socket.io"
    assert config.reconnection is False
    assert config.reconnection_attempts == 5
    assert config.log_payloads is True
    assert config.request_bootstrap_on_connect is False
    assert config.require_token() == "abc123"


def test_config_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VISITORS_CONNECT_TIMEOUT", "3")
    monkeypatch.setenv("VISITORS_KEY_FIELD", "visitorId")

    config = ConsoleConfig.from_env(connect_timeout=1.5, api_base="http://api.local")

    assert config.connect_timeout == 1.5
    assert config.key_field == "visitorId"
    assert config.rest_base == "http://api.local"
    assert config.socketio_path == "socket.io"
    assert config.reconnection is True
    assert config.reconnection_attempts == 0


def test_require_token_raises_when_missing() -> None:
    with pytest.raises(VisitorsConfigError):
        ConsoleConfig(token="  ").require_token()
