from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_PORT_ENV = "PORT"
_HOST_ENV = "HOST"
_SERVER_LABEL_ENV = "SERVER_LABEL"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    server_label: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(DEFAULT_PORT),
        server_label=_read_str_env(_SERVER_LABEL_ENV, "Node.js API on Render"),
        log_level=_read_log_level("INFO"),
    )
