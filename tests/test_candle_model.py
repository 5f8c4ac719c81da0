from datetime import date

import pytest

from swingpoints.domain.candle import Candle, chronological
from swingpoints.domain.timeframe import (
    FIFTEEN_MINUTES,
    FOUR_HOURS,
    ONE_DAY,
    ONE_HOUR,
    DateRange,
    Timeframe,
    TimeframeSelection,
    TimeUnit,
)


def candle(ts, price=1.0):
    return Candle(timestamp=ts, open=price, high=price, low=price, close=price, volume=1)


def test_chronological_reverses_newest_first_series():
    newest_first = [candle("2024-01-03T00:00:00"), candle("2024-01-02T00:00:00"), candle("2024-01-01T00:00:00")]
    assert [c.timestamp for c in chronological(newest_first)] == [
        "2024-01-01T00:00:00",
        "2024-01-02T00:00:00",
        "2024-01-03T00:00:00",
    ]


def test_chronological_joins_chunks_and_drops_shared_boundary():
    first_chunk = [candle("2024-01-31T09:15:00", 2), candle("2024-01-01T09:15:00")]
    second_chunk = [candle("2024-03-01T09:15:00"), candle("2024-01-31T09:15:00", 2)]
    ordered = chronological(first_chunk + second_chunk)
    assert [c.timestamp for c in ordered] == [
        "2024-01-01T09:15:00",
        "2024-01-31T09:15:00",
        "2024-03-01T09:15:00",
    ]


def test_candle_rejects_negative_volume():
    with pytest.raises(ValueError):
        Candle(timestamp="2024-01-01T00:00:00", open=1, high=1, low=1, close=1, volume=-1)


def test_timeframe_equality_is_structural():
    assert Timeframe(TimeUnit.HOURS, 4) == FOUR_HOURS
    assert Timeframe(TimeUnit.HOURS, 4) != ONE_HOUR
    assert FIFTEEN_MINUTES.key == "minutes_15"
    assert FOUR_HOURS.label == "4h"
    assert FIFTEEN_MINUTES.is_intraday and not ONE_DAY.is_intraday


def test_timeframe_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        Timeframe(TimeUnit.MINUTES, 0)


def test_date_range_span_and_order():
    assert DateRange(date(2024, 1, 1), date(2024, 1, 31)).span_days == 30
    with pytest.raises(ValueError):
        DateRange(date(2024, 2, 1), date(2024, 1, 1))


def test_selection_lists_only_enabled_timeframes():
    selection = TimeframeSelection(fifteen_min=True, one_day=True)
    assert selection.selected() == [ONE_DAY, FIFTEEN_MINUTES]
    assert TimeframeSelection().any_selected() is False
