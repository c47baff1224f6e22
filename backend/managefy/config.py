# backend/managefy/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # JWT signing key, with default dev key
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    # Clamped to [1, 24] hours by session_service
    JWT_LIFETIME_HOURS = int(os.environ.get("JWT_LIFETIME_HOURS", "12"))

    # SQLite DB stored in backend/instance/managefy.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///managefy.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Outbound mail; no MAIL_HOST means codes are only logged
    MAIL_HOST = os.environ.get("MAIL_HOST")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "587"))
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_SENDER = os.environ.get("MAIL_SENDER", "no-reply@managefy.local")
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_TIMEOUT_SECONDS = float(os.environ.get("MAIL_TIMEOUT_SECONDS", "10"))

    VALIDATION_CODE_TTL_MINUTES = int(os.environ.get("VALIDATION_CODE_TTL_MINUTES", "15"))

    # migrations.run: insert the demo fixture on startup (clean databases only)
    MIGRATIONS_RUN = _env_bool("MIGRATIONS_RUN", False)

    BIND_HOST = os.environ.get("BIND_HOST", "127.0.0.1")
    BIND_PORT = int(os.environ.get("BIND_PORT", "5000"))
