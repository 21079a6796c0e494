from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    generate_rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    record_store_db_path: str | None
    auth_jwt_secret: str | None
    auth_jwt_audience: str | None
    files_dir: str
    files_public_base_url: str
    max_upload_bytes: int

    @property
    def record_store_enabled(self) -> bool:
        return bool(self.record_store_db_path)


settings = Settings(
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    rate_limit=_get_env("RATE_LIMIT", "20/minute") or "20/minute",
    generate_rate_limit=_get_env("GENERATE_RATE_LIMIT", "5/minute") or "5/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    record_store_db_path=_get_env("RECORD_STORE_DB_PATH"),
    auth_jwt_secret=_get_env("AUTH_JWT_SECRET"),
    auth_jwt_audience=_get_env("AUTH_JWT_AUDIENCE", "authenticated"),
    files_dir=_get_env("FILES_DIR", "data/files") or "data/files",
    files_public_base_url=_get_env("FILES_PUBLIC_BASE_URL", "/files") or "/files",
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
)

if settings.record_store_enabled and not settings.auth_jwt_secret:
    raise RuntimeError("RECORD_STORE_DB_PATH requires AUTH_JWT_SECRET to be set.")
