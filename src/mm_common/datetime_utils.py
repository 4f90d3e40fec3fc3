"""UTC datetime and billing-period utilities."""

from datetime import datetime, timezone
from typing import NamedTuple


class YearMonth(NamedTuple):
    year: int
    month: int  # 1-12


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC; convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def period_of(ts: datetime) -> YearMonth:
    """Calendar (year, month) of a timestamp, evaluated in UTC."""
    utc = as_utc(ts)
    return YearMonth(utc.year, utc.month)


def previous_month(now: datetime) -> YearMonth:
    """The calendar month before `now`: 2024-01-15 -> (2023, 12)."""
    current = period_of(now)
    if current.month == 1:
        return YearMonth(current.year - 1, 12)
    return YearMonth(current.year, current.month - 1)
