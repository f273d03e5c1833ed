"""
Configuration helpers for the account API.

Settings are read from environment variables once and cached, so routers and
services never touch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    public_base_url: str
    password_scheme: str
    password_work_factor: int
    log_level: str
    cors_origins: tuple[str, ...]
    auth_rate_limit: int
    auth_rate_window_seconds: int
    trusted_proxies: tuple[str, ...]


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./accounts.db").strip(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        password_scheme=(os.getenv("PASSWORD_SCHEME") or "bcrypt").strip().lower(),
        password_work_factor=_int(os.getenv("PASSWORD_WORK_FACTOR", "10"), 10),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=_list(os.getenv("CORS_ORIGINS")),
        auth_rate_limit=_int(os.getenv("AUTH_RATE_LIMIT", "10"), 10),
        auth_rate_window_seconds=_int(os.getenv("AUTH_RATE_WINDOW_SECONDS", "300"), 300),
        trusted_proxies=_list(os.getenv("TRUSTED_PROXIES")),
    )
