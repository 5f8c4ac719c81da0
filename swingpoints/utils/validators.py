from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

_ZONE_SUFFIX = re.compile(r"(?:\.\d{3})?Z$|[+-]\d{2}:\d{2}$")


def to_price(value: Any) -> float:
    """Strict price cast: None, non-numeric, NaN and negative values raise ValueError."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"invalid price: {value!r}")
    try:
        casted = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid price: {value!r}") from exc
    if casted != casted or casted < 0:
        raise ValueError(f"invalid price: {value!r}")
    return casted


def to_native_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def strip_timezone(value: Any) -> str:
    """Drop a trailing ``Z``/``.mmmZ``/``+HH:MM`` so the wall-clock time is kept as-is.

    ``2025-08-26T00:00:00+05:30`` becomes ``2025-08-26T00:00:00``. Applying it
    twice gives the same result.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None).isoformat()
    return _ZONE_SUFFIX.sub("", str(value))


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError(f"invalid date: {value!r}") from exc
