from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .api import DEFAULT_API_BASE


ENV_API_BASE_URL = "SECURENOTE_API_BASE_URL"
ENV_ORIGIN = "SECURENOTE_ORIGIN"
ENV_SESSION_FILE = "SECURENOTE_SESSION_FILE"
ENV_SESSION_KEY = "SECURENOTE_SESSION_KEY"
ENV_DEBUG = "SECURENOTE_DEBUG"
ENV_HTTP_LOG_LEVEL = "SECURENOTE_HTTP_LOG_LEVEL"

DEFAULT_ORIGIN = "http://localhost:5173"
DEFAULT_SESSION_FILE = Path("~/.securenote/session.json")
DEFAULT_HTTP_LOG_LEVEL = "WARNING"

_TRUTHY = {"1", "true", "yes", "on"}


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(name)
    return v if v not in (None, "") else default


def _log_level(raw: Optional[str]) -> str:
    name = (raw or "").strip().upper()
    return name if name in logging.getLevelNamesMapping() else DEFAULT_HTTP_LOG_LEVEL


@dataclass(frozen=True)
class ClientConfig:
    """
    Client configuration resolved from the environment.

    Environment variables (all optional)
    - `SECURENOTE_API_BASE_URL`: API base URL (default: http://localhost:5000/api)
    - `SECURENOTE_ORIGIN`:       origin used when building share links
    - `SECURENOTE_SESSION_FILE`: encrypted session file location
    - `SECURENOTE_SESSION_KEY`:  Fernet key; without it the session is not persisted
    - `SECURENOTE_DEBUG`:        enable debug logging
    - `SECURENOTE_HTTP_LOG_LEVEL`: level for httpx/httpcore loggers (default: WARNING;
      unknown names fall back to the default)
    """

    api_base_url: str = DEFAULT_API_BASE
    origin: str = DEFAULT_ORIGIN
    session_file: Path = DEFAULT_SESSION_FILE
    session_key: Optional[str] = None
    debug: bool = False
    http_log_level: str = DEFAULT_HTTP_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "ClientConfig":
        session_file = _getenv(ENV_SESSION_FILE)
        debug = (_getenv(ENV_DEBUG, "") or "").strip().lower() in _TRUTHY
        return cls(
            api_base_url=_getenv(ENV_API_BASE_URL, DEFAULT_API_BASE) or DEFAULT_API_BASE,
            origin=_getenv(ENV_ORIGIN, DEFAULT_ORIGIN) or DEFAULT_ORIGIN,
            session_file=Path(session_file) if session_file else DEFAULT_SESSION_FILE,
            session_key=_getenv(ENV_SESSION_KEY),
            debug=debug,
            http_log_level=_log_level(_getenv(ENV_HTTP_LOG_LEVEL)),
        )

    @property
    def persists_session(self) -> bool:
        return self.session_key is not None
