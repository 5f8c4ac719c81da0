"""Candle and swing point value types."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar. ``timestamp`` is a wall-clock ISO string without zone."""

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: int = 0
    open_interest: int = 0

    def __post_init__(self):
        if self.volume < 0:
            raise ValueError(f"volume must be >= 0, got {self.volume}")
        if self.open_interest < 0:
            raise ValueError(f"open_interest must be >= 0, got {self.open_interest}")


class SwingLabel(str, Enum):
    HIGHER_HIGH = "HigherHigh"
    HIGHER_LOW = "HigherLow"
    LOWER_HIGH = "LowerHigh"
    LOWER_LOW = "LowerLow"
    SWING_HIGH = "SwingHigh"
    SWING_LOW = "SwingLow"

    @property
    def is_high(self) -> bool:
        return self in (SwingLabel.HIGHER_HIGH, SwingLabel.LOWER_HIGH, SwingLabel.SWING_HIGH)


@dataclass(frozen=True)
class AnnotatedCandle:
    """A candle with the swing flags derived for it."""

    candle: Candle
    is_swing_high: bool = False
    is_swing_low: bool = False
    is_higher_high: bool = False
    is_lower_high: bool = False
    is_higher_low: bool = False
    is_lower_low: bool = False

    @property
    def timestamp(self) -> str:
        return self.candle.timestamp


@dataclass(frozen=True)
class SwingPoint:
    timestamp: str
    price: float
    label: SwingLabel
    time: str
    candle: AnnotatedCandle


def chronological(candles: Iterable[Candle]) -> list[Candle]:
    """Return candles oldest first with repeated timestamps dropped.

    For a single newest-first upstream response this is a reversal. Multi-chunk
    responses share a boundary day, so the duplicates are removed here.
    """
    candles = list(candles)
    try:
        ordered = sorted(candles, key=lambda c: datetime.fromisoformat(c.timestamp))
    except (TypeError, ValueError):
        ordered = sorted(candles, key=lambda c: c.timestamp)
    result: list[Candle] = []
    for candle in ordered:
        if result and result[-1].timestamp == candle.timestamp:
            continue
        result.append(candle)
    return result
