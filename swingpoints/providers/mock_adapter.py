from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta

from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import Timeframe, TimeUnit
from swingpoints.providers.base import CandleProvider

logger = logging.getLogger(__name__)

_STEP = {
    TimeUnit.MINUTES: lambda n: timedelta(minutes=n),
    TimeUnit.HOURS: lambda n: timedelta(hours=n),
    TimeUnit.DAYS: lambda n: timedelta(days=n),
    TimeUnit.WEEKS: lambda n: timedelta(weeks=n),
    TimeUnit.MONTHS: lambda n: timedelta(days=30 * n),
}


class MockCandleProvider(CandleProvider):
    """Random-walk candles for running the service without Upstox credentials."""

    name = "mock"

    def __init__(self, rng: random.Random | None = None, base_price: float = 100.0, default_span_days: int = 30):
        self.rng = rng or random.Random()
        self.base_price = base_price
        self.default_span_days = default_span_days

    async def fetch_candles(
        self,
        instrument_key: str,
        timeframe: Timeframe,
        to_date: date,
        from_date: date | None = None,
    ) -> list[Candle]:
        start_day = from_date or (to_date - timedelta(days=self.default_span_days))
        logger.info(f"Generating mock {timeframe.label} candles for {instrument_key} from {start_day} to {to_date}")

        step = _STEP[timeframe.unit](timeframe.interval)
        current = datetime.combine(start_day, time.min)
        end = datetime.combine(to_date, time.min)
        price = self.base_price
        candles: list[Candle] = []

        while current <= end:
            open_ = price + (self.rng.random() - 0.5) * 10
            close = open_ + (self.rng.random() - 0.5) * 5
            candles.append(
                Candle(
                    timestamp=current.isoformat(),
                    open=round(open_, 2),
                    high=round(max(open_, close) + self.rng.random() * 3, 2),
                    low=round(min(open_, close) - self.rng.random() * 3, 2),
                    close=round(close, 2),
                    volume=self.rng.randint(0, 10_000),
                    open_interest=0,
                )
            )
            price = close
            current += step

        candles.reverse()
        return candles
