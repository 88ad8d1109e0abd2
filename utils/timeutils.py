"""Helpers for naive-UTC timestamps stored in the database."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""

    return datetime.now(UTC).replace(tzinfo=None)


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO 8601 string and normalize it to naive UTC.

    Raises ``ValueError`` when the string is not a valid date or datetime.
    """

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def isoformat_utc(value: datetime | None) -> str | None:
    """Serialize a naive UTC datetime with a trailing ``Z``."""

    if value is None:
        return None
    return value.isoformat() + "Z"
