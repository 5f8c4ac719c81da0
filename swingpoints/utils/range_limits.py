"""Per-timeframe maximum date spans accepted by the upstream."""
from __future__ import annotations

from datetime import date, timedelta

from swingpoints.domain.timeframe import DateRange, Timeframe, TimeUnit

DEFAULT_MAX_SPAN_DAYS = 365

_MAX_SPAN_DAYS: dict[tuple[TimeUnit, int], int] = {
    (TimeUnit.MINUTES, 1): 7,
    (TimeUnit.MINUTES, 5): 30,
    (TimeUnit.MINUTES, 15): 30,
    (TimeUnit.MINUTES, 30): 90,
    (TimeUnit.HOURS, 1): 90,
    (TimeUnit.HOURS, 4): 180,
    (TimeUnit.DAYS, 1): 365,
    (TimeUnit.WEEKS, 1): 1825,
    (TimeUnit.MONTHS, 1): 1825,
}


def max_span_days(timeframe: Timeframe) -> int:
    return _MAX_SPAN_DAYS.get((timeframe.unit, timeframe.interval), DEFAULT_MAX_SPAN_DAYS)


def exceeds_limit(timeframe: Timeframe, date_range: DateRange) -> bool:
    return date_range.span_days > max_span_days(timeframe)


def suggest_from_date(timeframe: Timeframe, to_date: date) -> date:
    return to_date - timedelta(days=max_span_days(timeframe))


def shrink_from_date(from_date: date, days: int) -> date:
    return from_date + timedelta(days=days)
