"""Application configuration module."""

import os
import re
from datetime import timedelta

ENVIRONMENTS = ("development", "production", "test")
DEFAULT_SECRET_KEY = "change-me"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(raw: str | int | None, default: timedelta) -> timedelta:
    """Parse values like ``"1h"``, ``"30m"`` or ``"900"`` into a timedelta."""

    if raw is None or raw == "":
        return default
    if isinstance(raw, int):
        return timedelta(seconds=raw)
    match = _DURATION_RE.match(str(raw).lower())
    if match is None:
        raise ValueError(f"Invalid duration: {raw!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


def _parse_bool(raw: str | None, default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _split_origins(raw: str) -> str | list[str]:
    if raw.strip() == "*":
        return "*"
    return [o.strip() for o in raw.split(",") if o.strip()]


class Config:
    """Base configuration for the Flask application."""

    # Core
    APP_ENV = os.getenv("APP_ENV", "development")
    PORT = int(os.getenv("PORT", "5000"))
    API_PREFIX = os.getenv("API_PREFIX", "api").strip("/")
    SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    EXPOSE_STACK_TRACES = _parse_bool(
        os.getenv("EXPOSE_STACK_TRACES"), default=APP_ENV == "development"
    )

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or "sqlite:///app.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(
        os.getenv("JWT_EXPIRATION"), timedelta(hours=1)
    )

    # Session cookie used by the web frontend
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # CORS
    CORS_ORIGINS = _split_origins(os.getenv("ALLOWED_ORIGINS", "http://localhost:3000"))

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 15 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")

    # Email verification
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5000").rstrip("/")
    VERIFICATION_TOKEN_TTL_HOURS = int(os.getenv("VERIFICATION_TOKEN_TTL_HOURS", "8"))

    # Mail
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    SMTP_FROM = os.getenv("SMTP_FROM", '"Auth App" <noreply@example.com>')
    SMTP_USE_TLS = _parse_bool(os.getenv("SMTP_USE_TLS"), default=True)
    SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "10"))
    MAIL_BACKEND = os.getenv("MAIL_BACKEND") or ("smtp" if SMTP_HOST else "console")


def validate_config(config) -> None:
    """Reject configurations that cannot run safely.

    ``config`` is any mapping exposing the keys above (``app.config`` in
    practice). Raises ``RuntimeError`` listing every problem found.
    """

    problems = []
    env = config.get("APP_ENV")
    if env not in ENVIRONMENTS:
        problems.append(f"APP_ENV must be one of: {', '.join(ENVIRONMENTS)}.")

    if not config.get("API_PREFIX"):
        problems.append("API_PREFIX must not be empty.")

    if config.get("MAIL_BACKEND") not in {"smtp", "console"}:
        problems.append("MAIL_BACKEND must be 'smtp' or 'console'.")
    elif config.get("MAIL_BACKEND") == "smtp" and not config.get("SMTP_HOST"):
        problems.append("SMTP_HOST is required when MAIL_BACKEND is 'smtp'.")

    if env == "production":
        if config.get("SECRET_KEY") in (None, "", DEFAULT_SECRET_KEY):
            problems.append("SECRET_KEY must be set in production.")
        if config.get("JWT_SECRET_KEY") in (None, "", DEFAULT_SECRET_KEY):
            problems.append("JWT_SECRET_KEY must be set in production.")
        if not config.get("DATABASE_URL"):
            problems.append("DATABASE_URL must be set in production.")

    if problems:
        raise RuntimeError("Invalid configuration: " + " ".join(problems))
