from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable

from swingpoints.config.settings import settings
from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import FIFTEEN_MINUTES, DateRange, Timeframe
from swingpoints.errors import UpstreamFailure
from swingpoints.internal_metrics import MetricsCollector
from swingpoints.resilience_range_retry import ResilientClient

logger = logging.getLogger(__name__)


def plan_chunks(date_range: DateRange, width_days: int) -> list[DateRange]:
    """Split ``date_range`` into windows of ``width_days``.

    Consecutive chunks share their boundary day and the last one is clipped to
    ``date_range.to_date``.
    """
    if width_days < 1:
        raise ValueError(f"width_days must be positive, got {width_days}")
    if date_range.from_date == date_range.to_date:
        return [date_range]

    chunks: list[DateRange] = []
    cursor = date_range.from_date
    while cursor < date_range.to_date:
        chunk_to = min(cursor + timedelta(days=width_days), date_range.to_date)
        chunks.append(DateRange(cursor, chunk_to))
        cursor = chunk_to
    return chunks


class ChunkedFetcher:
    """Fetches intraday history one chunk at a time through a ResilientClient."""

    def __init__(
        self,
        client: ResilientClient,
        delay_seconds: float | None = None,
        chunk_days_15min: int | None = None,
        chunk_days_default: int | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.delay_seconds = settings.chunk_delay_seconds if delay_seconds is None else delay_seconds
        self.chunk_days_15min = chunk_days_15min or settings.chunk_days_15min
        self.chunk_days_default = chunk_days_default or settings.chunk_days_default
        self.metrics = metrics
        self._sleep = sleep

    def chunk_days_for(self, timeframe: Timeframe) -> int:
        if timeframe == FIFTEEN_MINUTES:
            return self.chunk_days_15min
        return self.chunk_days_default

    async def fetch_in_chunks(self, instrument_key: str, timeframe: Timeframe, date_range: DateRange) -> list[Candle]:
        chunks = plan_chunks(date_range, self.chunk_days_for(timeframe))
        logger.info(f"Fetching {timeframe.label} for {instrument_key} in {len(chunks)} chunks")

        candles: list[Candle] = []
        for index, chunk in enumerate(chunks):
            try:
                chunk_candles = await self.client.fetch(instrument_key, timeframe, chunk.to_date, chunk.from_date)
                candles.extend(chunk_candles)
            except UpstreamFailure as exc:
                logger.warning(
                    f"Error fetching {timeframe.label} chunk {chunk.from_date} -> {chunk.to_date}: {exc}",
                    extra={"instrument_key": instrument_key, "chunk_index": index},
                )
                if self.metrics is not None:
                    self.metrics.record_chunk_failure(timeframe.label)

            if index < len(chunks) - 1:
                await self._sleep(self.delay_seconds)

        return candles
