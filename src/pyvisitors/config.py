"""Client configuration for pyvisitors."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyvisitors.exceptions import VisitorsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class ConsoleConfig:
    """Client configuration.

    Parameters
    ----------
    server_url : str
        Base URL of the Socket.IO event server.
    api_base : str or None
        Base URL for REST calls (entity deletion).  Defaults to
        ``server_url``.
    token : str or None
        Bearer token sent with REST calls.  The event channel itself is
        unauthenticated.
    socketio_path : str
        Socket.IO endpoint path on ``server_url``.
    key_field : str
        Record field holding the entity key.
    connect_timeout : float
        Seconds to wait for the Socket.IO handshake.
    reconnection : bool
        Let the Socket.IO client reconnect after a dropped connection.
        Every reconnect triggers a fresh bootstrap request.
    reconnection_attempts : int
        Reconnect attempts before giving up.  ``0`` retries forever.
    request_bootstrap_on_connect : bool
        Emit ``loadData`` immediately after the channel opens.
    log_payloads : bool
        Emit (redacted) event payloads at DEBUG level.
    """

    server_url: str = "http://localhost:3000"
    api_base: str | None = None
    token: str | None = None
    socketio_path: str = "socket.io"
    key_field: str = "ip"
    connect_timeout: float = 10.0
    reconnection: bool = True
    reconnection_attempts: int = 0
    request_bootstrap_on_connect: bool = True
    log_payloads: bool = False

    @property
    def rest_base(self) -> str:
        """Base URL for REST calls, without a trailing slash."""
        return (self.api_base or self.server_url).rstrip("/")

    def require_token(self) -> str:
        """Return the bearer token or raise if none is configured."""
        token = (self.token or "").strip()
        if not token:
            raise VisitorsConfigError("No API token configured (set VISITORS_TOKEN or pass token=...)")
        return token

    @classmethod
    def from_env(cls, **overrides: Any) -> ConsoleConfig:
        """Create configuration from environment variables.

        Reads ``VISITORS_*`` variables.  Explicit keyword arguments
        override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VISITORS_SERVER_URL": "server_url",
            "VISITORS_API_BASE": "api_base",
            "VISITORS_TOKEN": "token",
            "VISITORS_SOCKETIO_PATH": "socketio_path",
            "VISITORS_KEY_FIELD": "key_field",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("VISITORS_CONNECT_TIMEOUT")
        if timeout_env is not None and "connect_timeout" not in overrides:
            config_kwargs["connect_timeout"] = float(timeout_env)

        if "reconnection" not in overrides:
            config_kwargs["reconnection"] = _env_bool(env.get("VISITORS_RECONNECTION"), True)

        attempts_env = env.get("VISITORS_RECONNECTION_ATTEMPTS")
        if attempts_env is not None and "reconnection_attempts" not in overrides:
            config_kwargs["reconnection_attempts"] = int(attempts_env)

        if "request_bootstrap_on_connect" not in overrides:
            config_kwargs["request_bootstrap_on_connect"] = _env_bool(env.get("VISITORS_REQUEST_BOOTSTRAP"), True)

        if "log_payloads" not in overrides:
            config_kwargs["log_payloads"] = _env_bool(env.get("VISITORS_LOG_PAYLOADS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
