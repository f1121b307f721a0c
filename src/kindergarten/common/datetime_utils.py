from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_month_days(year: int, month: int) -> Iterator[date]:
    start, end = month_bounds(year, month)
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1
