"""Datetime helpers for assertions against values read back from SQLite."""

from __future__ import annotations

from datetime import UTC, datetime


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; SQLite drops the offset on storage."""

    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
