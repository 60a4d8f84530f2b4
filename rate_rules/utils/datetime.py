"""Helpers for working with timezone-aware datetimes.

Rule windows are instants. Inside the domain every datetime is aware and
expressed in UTC; naive values coming from callers or from the database are
taken to be UTC already.
"""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in UTC."""

    if value is None:
        return None

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_naive_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` converted to UTC but without ``tzinfo``.

    Not every backend keeps the offset of a ``DateTime(timezone=True)`` column
    (SQLite drops it), so values are stored as naive UTC and
    :func:`ensure_utc` re-attaches the zone when reading them back.
    """

    localized = ensure_utc(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def format_instant(value: datetime | None) -> str | None:
    """Return the ISO-8601 representation of ``value`` in UTC."""

    localized = ensure_utc(value)
    if localized is None:
        return None
    return localized.isoformat()
