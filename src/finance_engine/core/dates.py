from __future__ import annotations
import calendar
from datetime import date, datetime, time
from typing import Tuple, Union

from finance_engine.core.models import DateRange, Granularity, MonthKey, YearKey

DateLike = Union[date, datetime]


def month_key(d: DateLike) -> MonthKey:
    return f"{d.year:04d}-{d.month:02d}"


def year_key(d: DateLike) -> YearKey:
    return f"{d.year:04d}"


def as_granularity(granularity) -> Granularity:
    if isinstance(granularity, Granularity):
        return granularity
    try:
        return Granularity(str(granularity).lower())
    except ValueError:
        raise ValueError(
            f"granularity must be 'month' or 'year', got {granularity!r}"
        ) from None


def period_key(d: DateLike, granularity=Granularity.MONTH) -> str:
    if as_granularity(granularity) is Granularity.YEAR:
        return year_key(d)
    return month_key(d)


def parse_period_key(key: str) -> Tuple[int, int | None]:
    """'YYYY-MM' -> (year, month); 'YYYY' -> (year, None)."""
    parts = str(key).split("-")
    digits = all(p.isascii() and p.isdigit() for p in parts)
    if digits and len(parts) == 1 and len(parts[0]) == 4:
        return int(parts[0]), None
    if digits and len(parts) == 2 and len(parts[0]) == 4 and len(parts[1]) == 2:
        y, m = int(parts[0]), int(parts[1])
        if 1 <= m <= 12:
            return y, m
    raise ValueError(f"not a period key (expected YYYY or YYYY-MM): {key!r}")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def month_range(year: int, month: int) -> DateRange:
    return DateRange(
        start=_start_of_day(date(year, month, 1)),
        end=_end_of_day(date(year, month, days_in_month(year, month))),
    )


def year_range(year: int) -> DateRange:
    return DateRange(
        start=_start_of_day(date(year, 1, 1)),
        end=_end_of_day(date(year, 12, 31)),
    )


def period_range(key: str) -> DateRange:
    y, m = parse_period_key(key)
    return year_range(y) if m is None else month_range(y, m)


def range_bounds(date_range: DateRange) -> Tuple[datetime, datetime]:
    """Resolve a DateRange to inclusive datetimes; bare dates span the whole day."""
    start, end = date_range.start, date_range.end
    if not isinstance(start, datetime):
        start = _start_of_day(start)
    if not isinstance(end, datetime):
        end = _end_of_day(end)
    if start > end:
        raise ValueError(f"date range start {start} is after end {end}")
    return start, end


def shift_period_key(key: str, steps: int) -> str:
    y, m = parse_period_key(key)
    if m is None:
        return f"{y + steps:04d}"
    idx = y * 12 + (m - 1) + steps
    return f"{idx // 12:04d}-{idx % 12 + 1:02d}"


def previous_period_key(key: str) -> str:
    return shift_period_key(key, -1)


def days_elapsed_in_month(key: MonthKey, today: date) -> int:
    """0 for future months, the full length for past months, today's day otherwise."""
    y, m = parse_period_key(key)
    if m is None:
        raise ValueError(f"expected a month key, got {key!r}")
    if (y, m) > (today.year, today.month):
        return 0
    if (y, m) < (today.year, today.month):
        return days_in_month(y, m)
    return today.day


def is_period_in_past(key: str, today: date) -> bool:
    """True once the whole period has elapsed (the caller locks editing on this)."""
    if isinstance(today, datetime):
        today = today.date()
    return period_range(key).end.date() < today
