"""Time helpers shared by the ledger.

All timestamps are compared in UTC. Naive datetimes (as returned by SQLite,
which drops the offset) are interpreted as UTC; aware ones are converted.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias
from datetime import UTC, datetime, time

Clock: TypeAlias = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


__all__ = ["Clock", "utc_now", "ensure_utc", "start_of_day", "end_of_day"]
