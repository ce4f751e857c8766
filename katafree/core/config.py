"""
Configuration helpers for the katafree backend.

Exposes a Settings object read from environment variables (storage backend,
token secret, logging, CORS, rate limits) so that routers/services do not
fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    data_file: str
    jwt_secret: str
    jwt_ttl_seconds: int
    log_level: str
    cors_origins: tuple[str, ...]
    rate_limit_max: int
    rate_limit_window_seconds: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        items = [item.strip() for item in (value or "").split(",")]
        return tuple(item for item in items if item)

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        data_file=os.getenv("DATA_FILE", os.path.join("data", "db.json")),
        jwt_secret=os.getenv("JWT_SECRET") or "devsecret",
        jwt_ttl_seconds=_int(os.getenv("JWT_TTL_SECONDS", "604800"), 604800),
        log_level=(os.getenv("LOG_LEVEL") or "info").upper(),
        cors_origins=_list(os.getenv("CORS_ORIGINS", "*")),
        rate_limit_max=_int(os.getenv("RATE_LIMIT_MAX", "200"), 200),
        rate_limit_window_seconds=_int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"), 900),
    )
