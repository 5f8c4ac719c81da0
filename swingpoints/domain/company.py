from __future__ import annotations

from dataclasses import dataclass

from swingpoints.domain.candle import SwingPoint

# Fixed value of the ``timeframe`` field in every response
PROCESSED_TIMEFRAME = 1


@dataclass(frozen=True)
class ProcessedCompany:
    instrument_key: str
    company_name: str
    timeframe: int = PROCESSED_TIMEFRAME
    swing_points_day: list[SwingPoint] | None = None
    swing_points_4h: list[SwingPoint] | None = None
    swing_points_1h: list[SwingPoint] | None = None
    swing_points_15min: list[SwingPoint] | None = None
