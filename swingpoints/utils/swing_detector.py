"""Swing high/low detection over a chronological candle series."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from swingpoints.domain.candle import AnnotatedCandle, Candle, SwingLabel, SwingPoint


@dataclass(frozen=True)
class _Extremum:
    index: int
    price: float
    label: SwingLabel


def _is_swing_high(candles: Sequence[Candle], i: int, window: int) -> bool:
    high = candles[i].high
    return all(high > candles[j].high for j in range(i - window, i + window + 1) if j != i)


def _is_swing_low(candles: Sequence[Candle], i: int, window: int) -> bool:
    low = candles[i].low
    return all(low < candles[j].low for j in range(i - window, i + window + 1) if j != i)


def _relative_label(price: float, previous: float | None, higher: SwingLabel, lower: SwingLabel, first: SwingLabel) -> SwingLabel:
    if previous is None:
        return first
    return higher if price > previous else lower


def detect_swing_points(candles: Sequence[Candle], window: int) -> list[SwingPoint]:
    """Label local highs and lows of ``candles`` (oldest first).

    A candle is a swing high when its high is strictly above the highs of the
    ``window`` candles on each side, and a swing low when its low is strictly
    below their lows. Candles closer than ``window`` to either end are never
    confirmed. Each confirmed point is then compared with the previous point of
    the same polarity to tell higher highs/lows from lower ones.
    """
    if window < 1:
        raise ValueError(f"window must be a positive integer, got {window}")

    extrema: list[_Extremum] = []
    previous_high: float | None = None
    previous_low: float | None = None

    for i in range(window, len(candles) - window):
        candle = candles[i]
        if _is_swing_high(candles, i, window):
            label = _relative_label(candle.high, previous_high, SwingLabel.HIGHER_HIGH, SwingLabel.LOWER_HIGH, SwingLabel.SWING_HIGH)
            extrema.append(_Extremum(i, candle.high, label))
            previous_high = candle.high
        if _is_swing_low(candles, i, window):
            label = _relative_label(candle.low, previous_low, SwingLabel.HIGHER_LOW, SwingLabel.LOWER_LOW, SwingLabel.SWING_LOW)
            extrema.append(_Extremum(i, candle.low, label))
            previous_low = candle.low

    labels_by_index: dict[int, set[SwingLabel]] = {}
    for extremum in extrema:
        labels_by_index.setdefault(extremum.index, set()).add(extremum.label)

    annotated: dict[int, AnnotatedCandle] = {}
    for index, labels in labels_by_index.items():
        annotated[index] = AnnotatedCandle(
            candle=candles[index],
            is_swing_high=any(label.is_high for label in labels),
            is_swing_low=any(not label.is_high for label in labels),
            is_higher_high=SwingLabel.HIGHER_HIGH in labels,
            is_lower_high=SwingLabel.LOWER_HIGH in labels,
            is_higher_low=SwingLabel.HIGHER_LOW in labels,
            is_lower_low=SwingLabel.LOWER_LOW in labels,
        )

    return [
        SwingPoint(
            timestamp=candles[e.index].timestamp,
            price=e.price,
            label=e.label,
            time=candles[e.index].timestamp,
            candle=annotated[e.index],
        )
        for e in extrema
    ]
