"""Utility methods used by multiple components."""

from __future__ import annotations

import datetime

__all__ = [
    "now_factory",
    "normalize_instant",
]


def now_factory() -> datetime.datetime:
    """Factory method for the current instant to facilitate mocking."""
    return datetime.datetime.now(tz=datetime.UTC)


def normalize_instant(value: datetime.datetime | None) -> datetime.datetime:
    """Convert a datetime to an instant in UTC, defaulting to now.

    Naive values are interpreted as UTC since every instant handled by this
    library is a point on the UTC time line.
    """
    if value is None:
        return now_factory()
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)
