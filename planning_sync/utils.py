"""
Small shared helpers — identifier generation and UTC timestamps.
"""
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Random 128-bit identifier as 32 hex characters."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt):
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat(dt):
    """ISO-8601 string for a stored timestamp, or None."""
    dt = as_utc(dt)
    return dt.isoformat() if dt else None
