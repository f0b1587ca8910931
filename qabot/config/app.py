"""
qabot.config.app – service settings (dataclass + validators).

Env vars: QABOT_KB_PATH, QABOT_SESSION_TTL_SECONDS, QABOT_MAX_SESSIONS,
QABOT_MAX_HISTORY, CORS_ORIGINS.

The knowledge base carries its own matching settings (thresholds, tokenizer,
fallback endpoint); this module only covers how the process runs.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

from qabot.core.exceptions import ConfigurationError


def _validate_positive_int(value: int, name: str, min_val: int = 1) -> int:
    if not isinstance(value, int) or value < min_val:
        raise ConfigurationError(
            f"{name} must be an integer >= {min_val}, got {value!r}",
            details={"field": name},
        )
    return value


@dataclass(frozen=True)
class AppConfig:
    """Process-level configuration. All fields are validated on construction."""

    kb_path: str = "data.xml"
    """Knowledge base file (.xml or .json)."""

    session_ttl_seconds: int = 3600
    """Idle time after which a session is forgotten."""

    max_sessions: int = 10_000
    """Capacity of the session store; least recently used sessions are evicted."""

    max_history: int = 0
    """Turns kept per session (0 = unbounded)."""

    cors_origins: Tuple[str, ...] = field(
        default=("http://localhost:3000", "http://127.0.0.1:3000"),
    )

    def __post_init__(self) -> None:
        if not self.kb_path or not self.kb_path.strip():
            raise ConfigurationError("kb_path must be a non-empty path")
        _validate_positive_int(self.session_ttl_seconds, "session_ttl_seconds")
        _validate_positive_int(self.max_sessions, "max_sessions")
        _validate_positive_int(self.max_history, "max_history", min_val=0)

    @classmethod
    def from_env(cls, **overrides: object) -> "AppConfig":
        def pick(key: str, env: str, default: str) -> str:
            value = overrides.get(key)
            return str(value) if value is not None else os.environ.get(env, default)

        try:
            ttl = int(pick("session_ttl_seconds", "QABOT_SESSION_TTL_SECONDS", "3600"))
            max_sessions = int(pick("max_sessions", "QABOT_MAX_SESSIONS", "10000"))
            max_history = int(pick("max_history", "QABOT_MAX_HISTORY", "0"))
        except ValueError as exc:
            raise ConfigurationError("Session limits must be integers", cause=exc) from exc

        origins = pick(
            "cors_origins", "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000",
        )
        return cls(
            kb_path=pick("kb_path", "QABOT_KB_PATH", "data.xml").strip(),
            session_ttl_seconds=ttl,
            max_sessions=max_sessions,
            max_history=max_history,
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


def load_app_config(**overrides: object) -> AppConfig:
    return AppConfig.from_env(**overrides)
