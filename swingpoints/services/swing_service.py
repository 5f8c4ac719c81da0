"""Fetches every selected timeframe and turns the candles into swing points."""
from __future__ import annotations

import asyncio
import logging
from datetime import date

from swingpoints.config.settings import settings
from swingpoints.domain.candle import Candle, SwingPoint, chronological
from swingpoints.domain.company import ProcessedCompany
from swingpoints.domain.timeframe import FIFTEEN_MINUTES, FOUR_HOURS, ONE_DAY, ONE_HOUR, DateRange, Timeframe, TimeframeSelection
from swingpoints.errors import ClientInputError
from swingpoints.internal_metrics import MetricsCollector
from swingpoints.providers.base import CandleProvider
from swingpoints.resilience_range_retry import ResilientClient
from swingpoints.services.chunked_fetcher import ChunkedFetcher
from swingpoints.services.historical_service import HistoricalService
from swingpoints.utils.swing_detector import detect_swing_points

logger = logging.getLogger(__name__)


def default_from_date(to_date: date, years_back: int) -> date:
    try:
        return to_date.replace(year=to_date.year - years_back)
    except ValueError:
        # Feb 29 in a non-leap target year
        return to_date.replace(year=to_date.year - years_back, day=28)


class SwingService:
    def __init__(self, historical_service: HistoricalService, window: int | None = None, lookback_years: int | None = None):
        self.historical_service = historical_service
        self.window = window or settings.swing_window
        self.lookback_years = lookback_years or settings.default_lookback_years

    @classmethod
    def from_provider(cls, provider: CandleProvider, metrics: MetricsCollector | None = None, **kwargs) -> "SwingService":
        client = ResilientClient(provider, metrics=metrics)
        fetcher = ChunkedFetcher(client, metrics=metrics)
        return cls(HistoricalService(client, fetcher), **kwargs)

    async def fetch_all_timeframes(
        self,
        instrument_key: str,
        date_range: DateRange,
        selection: TimeframeSelection,
    ) -> dict[Timeframe, list[Candle]]:
        """Fetch the selected timeframes concurrently, each returned oldest first.

        If one timeframe fails or the caller is cancelled, the other fetches
        are cancelled as well.
        """
        tasks = {
            timeframe: asyncio.create_task(self.historical_service.get_historical(instrument_key, timeframe, date_range))
            for timeframe in selection.selected()
        }
        try:
            await asyncio.gather(*tasks.values())
        except BaseException:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise
        return {timeframe: chronological(task.result()) for timeframe, task in tasks.items()}

    def _swing_points(self, candles: list[Candle] | None) -> list[SwingPoint] | None:
        if not candles:
            return None
        return detect_swing_points(candles, self.window)

    async def process(
        self,
        instrument_key: str,
        company_name: str,
        from_date: date | None,
        selection: TimeframeSelection,
        to_date: date | None = None,
    ) -> ProcessedCompany | None:
        if not selection.any_selected():
            logger.info(f"No timeframe selected for {instrument_key}; nothing to fetch")
            return None

        to_date = to_date or date.today()
        from_date = from_date or default_from_date(to_date, self.lookback_years)
        if from_date > to_date:
            raise ClientInputError(f"fromDate {from_date} is after {to_date}")

        date_range = DateRange(from_date, to_date)
        series = await self.fetch_all_timeframes(instrument_key, date_range, selection)

        if not any(series.values()):
            logger.info(f"No candles returned for {instrument_key} in any selected timeframe")
            return None

        return ProcessedCompany(
            instrument_key=instrument_key,
            company_name=company_name,
            swing_points_day=self._swing_points(series.get(ONE_DAY)),
            swing_points_4h=self._swing_points(series.get(FOUR_HOURS)),
            swing_points_1h=self._swing_points(series.get(ONE_HOUR)),
            swing_points_15min=self._swing_points(series.get(FIFTEEN_MINUTES)),
        )
