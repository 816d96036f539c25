from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

REMOTE_BACKENDS = {"memory", "postgrest", "offline"}
CACHE_BACKENDS = {"memory", "sqlite"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - REMOTE_BACKEND: 'memory' (default), 'postgrest' or 'offline'
    - REMOTE_URL: base URL of the PostgREST/Supabase project (required for 'postgrest')
    - REMOTE_API_KEY: project api key sent as the 'apikey' header
    - REMOTE_ACCESS_TOKEN: bearer token; defaults to the api key
    - REMOTE_TIMEOUT: request timeout in seconds (default 20)
    - LOCAL_CACHE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to the sqlite cache file. Default './data/planner.db'
    - PLANNER_TIMEZONE: IANA timezone used for calendar-day bucketing (default 'UTC')
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to resolve owners from HTTP Basic credentials (default: false)
    - BASIC_AUTH_USERNAME / BASIC_AUTH_PASSWORD: credentials checked when basic auth is on
    - LOG_LEVEL: logging level name (default 'INFO')
    """

    remote_backend: str
    remote_url: Optional[str]
    remote_api_key: Optional[str]
    remote_access_token: Optional[str]
    remote_timeout: float
    cache_backend: str
    sqlite_db_path: str
    timezone: str
    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_username: Optional[str]
    basic_auth_password: Optional[str]
    log_level: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else logging.INFO


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    remote_backend = _get_env("REMOTE_BACKEND", "memory").strip().lower()
    if remote_backend not in REMOTE_BACKENDS:
        remote_backend = "memory"

    remote_url = os.getenv("REMOTE_URL") or None
    if remote_backend == "postgrest" and not remote_url:
        # Nothing to talk to; run local-only
        remote_backend = "offline"
    remote_key = os.getenv("REMOTE_API_KEY") or None

    cache_backend = _get_env("LOCAL_CACHE_BACKEND", "memory").strip().lower()
    if cache_backend not in CACHE_BACKENDS:
        cache_backend = "memory"

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    basic_user = os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None
    basic_pass = os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None

    return Settings(
        remote_backend=remote_backend,
        remote_url=remote_url.rstrip("/") if remote_url else None,
        remote_api_key=remote_key,
        remote_access_token=os.getenv("REMOTE_ACCESS_TOKEN") or remote_key,
        remote_timeout=_parse_float(_get_env("REMOTE_TIMEOUT", "20"), 20.0),
        cache_backend=cache_backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/planner.db").strip(),
        timezone=_get_env("PLANNER_TIMEZONE", "UTC").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=basic_user,
        basic_auth_password=basic_pass,
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
