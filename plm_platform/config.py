"""
Configuration for the PLM bridge.

Values come from the environment (``PLM_BRIDGE_*``). The web shell loads a
``.env`` file first, so the same names work there.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .envelope import DEFAULT_CLIENT_ID
from .session_store import ASPNET_SESSIONID_COOKIE, JSESSIONID_COOKIE

DEFAULT_TIMEOUT_MS = 60_000

# Checked in order; the first header present wins.
DEFAULT_SESSION_HEADERS = ("Authorization", "X-Siemens-Session-ID", "Tc-Session-ID")
DEFAULT_SESSION_COOKIES = (JSESSIONID_COOKIE, ASPNET_SESSIONID_COOKIE)

ENDPOINT_ENV = "PLM_BRIDGE_ENDPOINT"
TIMEOUT_MS_ENV = "PLM_BRIDGE_TIMEOUT_MS"
MOCK_MODE_ENV = "PLM_BRIDGE_MOCK_MODE"
CLIENT_ID_ENV = "PLM_BRIDGE_CLIENT_ID"
SESSION_HEADERS_ENV = "PLM_BRIDGE_SESSION_HEADERS"
LOG_LEVEL_ENV = "PLM_BRIDGE_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class BridgeConfig:
    """Connection settings for one backend."""

    endpoint: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    mock_mode: bool = False
    client_id: str = DEFAULT_CLIENT_ID
    session_header_names: tuple[str, ...] = DEFAULT_SESSION_HEADERS
    session_cookie_names: tuple[str, ...] = DEFAULT_SESSION_COOKIES
    extra_headers: Mapping[str, str] = field(default_factory=dict)
    log_level: str = "INFO"

    def __post_init__(self):
        object.__setattr__(self, "endpoint", (self.endpoint or "").rstrip("/"))
        if self.timeout_ms <= 0:
            object.__setattr__(self, "timeout_ms", DEFAULT_TIMEOUT_MS)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def url_for(self, service: str, operation: str) -> str:
        return f"{self.endpoint}/{service}/{operation}"


def _to_int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _to_bool_env(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _to_tuple_env(environ: Mapping[str, str], name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    values = tuple(part.strip() for part in raw.split(",") if part.strip())
    return values or default


def resolve_log_level(environ: Mapping[str, str] | None = None) -> str:
    """Return the configured log level name, or ``INFO`` when unset or unknown."""
    env = os.environ if environ is None else environ
    level = env.get(LOG_LEVEL_ENV, "").strip().upper()
    return level if level in LOG_LEVELS else "INFO"


def load_config(environ: Mapping[str, str] | None = None) -> BridgeConfig:
    """Build a ``BridgeConfig`` from environment variables.

    Raises:
        ValueError: when no endpoint is configured and mock mode is off.
    """
    env = os.environ if environ is None else environ

    mock_mode = _to_bool_env(env, MOCK_MODE_ENV)
    endpoint = env.get(ENDPOINT_ENV, "").strip()
    if not endpoint and not mock_mode:
        raise ValueError(
            f"No backend endpoint configured. Set {ENDPOINT_ENV} "
            f"or enable mock mode with {MOCK_MODE_ENV}=1."
        )

    return BridgeConfig(
        endpoint=endpoint,
        timeout_ms=_to_int_env(env, TIMEOUT_MS_ENV, DEFAULT_TIMEOUT_MS),
        mock_mode=mock_mode,
        client_id=env.get(CLIENT_ID_ENV, "").strip() or DEFAULT_CLIENT_ID,
        session_header_names=_to_tuple_env(env, SESSION_HEADERS_ENV, DEFAULT_SESSION_HEADERS),
        log_level=resolve_log_level(env),
    )
