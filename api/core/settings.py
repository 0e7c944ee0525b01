"""
Environment-driven settings.

Values are read on every call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def app_env() -> str:
    return env_str("APP_ENV", "development").lower()


def is_development() -> bool:
    return app_env() == "development"


def uploads_dir() -> Path:
    return Path(env_str("UPLOADS_DIR", "uploads")).resolve()


def max_upload_bytes() -> int:
    value = env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
