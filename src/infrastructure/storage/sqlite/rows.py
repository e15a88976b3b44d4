"""Column conversions shared by the SQLite stores."""

import sqlite3
from datetime import UTC, datetime
from decimal import Decimal

from src.core.entities.common import utcnow


def dec(value: Decimal | None) -> str | None:
    """Decimal to TEXT column value."""
    return None if value is None else str(value)


def to_dec(value: str | None) -> Decimal | None:
    """TEXT column value to Decimal."""
    return None if value is None else Decimal(value)


def ts(value: datetime | None) -> str | None:
    """Datetime to an ISO-8601 UTC string that sorts chronologically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def to_ts(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def to_ts_or_now(value: str | None) -> datetime:
    return to_ts(value) or utcnow()


def is_unique_violation(error: BaseException) -> bool:
    return isinstance(error, sqlite3.IntegrityError) and "UNIQUE" in str(error)


def is_foreign_key_violation(error: BaseException) -> bool:
    return isinstance(error, sqlite3.IntegrityError) and "FOREIGN KEY" in str(error)
