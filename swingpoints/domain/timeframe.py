from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class TimeUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


@dataclass(frozen=True)
class Timeframe:
    unit: TimeUnit
    interval: int

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")

    @property
    def key(self) -> str:
        return f"{self.unit.value}_{self.interval}"

    @property
    def label(self) -> str:
        suffix = {TimeUnit.MINUTES: "m", TimeUnit.HOURS: "h", TimeUnit.DAYS: "d", TimeUnit.WEEKS: "w", TimeUnit.MONTHS: "M"}
        return f"{self.interval}{suffix[self.unit]}"

    @property
    def is_intraday(self) -> bool:
        return self.unit in (TimeUnit.MINUTES, TimeUnit.HOURS)


FIFTEEN_MINUTES = Timeframe(TimeUnit.MINUTES, 15)
ONE_HOUR = Timeframe(TimeUnit.HOURS, 1)
FOUR_HOURS = Timeframe(TimeUnit.HOURS, 4)
ONE_DAY = Timeframe(TimeUnit.DAYS, 1)


@dataclass(frozen=True)
class DateRange:
    from_date: date
    to_date: date

    def __post_init__(self):
        if self.from_date > self.to_date:
            raise ValueError(f"from_date {self.from_date} is after to_date {self.to_date}")

    @property
    def span_days(self) -> int:
        return abs((self.to_date - self.from_date).days)


@dataclass(frozen=True)
class TimeframeSelection:
    fifteen_min: bool = False
    one_hour: bool = False
    four_hour: bool = False
    one_day: bool = False

    def selected(self) -> list[Timeframe]:
        """Selected timeframes, daily first."""
        flags = [
            (self.one_day, ONE_DAY),
            (self.four_hour, FOUR_HOURS),
            (self.one_hour, ONE_HOUR),
            (self.fifteen_min, FIFTEEN_MINUTES),
        ]
        return [timeframe for enabled, timeframe in flags if enabled]

    def any_selected(self) -> bool:
        return bool(self.selected())
