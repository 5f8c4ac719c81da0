"""Shrink-and-retry wrapper around a single upstream candle request.

The upstream answers HTTP 400 "Invalid date range" when a span is too wide for
the timeframe. The range itself is the problem, so each retry moves
``from_date`` later by a fixed number of days instead of backing off
exponentially. The short pause between attempts only keeps the retry cycle
from hammering the upstream.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable

from swingpoints.config.settings import settings
from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import DateRange, Timeframe
from swingpoints.errors import RangeTooWideError, RetriesExhaustedError, UpstreamFailure
from swingpoints.internal_metrics import MetricsCollector, RequestTimer
from swingpoints.providers.base import CandleProvider
from swingpoints.utils.range_limits import exceeds_limit, max_span_days, shrink_from_date, suggest_from_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchAttempt:
    number: int
    from_date: date | None
    to_date: date

    @property
    def span_days(self) -> int | None:
        if self.from_date is None:
            return None
        return abs((self.to_date - self.from_date).days)

    def shrink(self, days: int) -> "FetchAttempt":
        return FetchAttempt(number=self.number + 1, from_date=shrink_from_date(self.from_date, days), to_date=self.to_date)


class ResilientClient:
    def __init__(
        self,
        provider: CandleProvider,
        max_retries: int | None = None,
        shrink_days: int | None = None,
        backoff_seconds: float | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.max_retries = settings.range_retry_max_retries if max_retries is None else max_retries
        self.shrink_days = settings.range_retry_shrink_days if shrink_days is None else shrink_days
        self.backoff_seconds = settings.range_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.metrics = metrics
        self._sleep = sleep

    def _check_limits(self, timeframe: Timeframe, to_date: date, from_date: date | None):
        limit = max_span_days(timeframe)
        if from_date is None:
            logger.info(f"No from_date provided. For {timeframe.key}, consider using from_date {suggest_from_date(timeframe, to_date)}")
            return
        if from_date > to_date:
            return
        date_range = DateRange(from_date, to_date)
        if exceeds_limit(timeframe, date_range):
            logger.warning(
                f"Date range ({date_range.span_days} days) exceeds maximum for {timeframe.key} ({limit} days); "
                f"upstream may reject it. Suggested from_date: {suggest_from_date(timeframe, to_date)}"
            )

    def _record(self, timeframe: Timeframe, success: bool, timer: RequestTimer, history: list[FetchAttempt]):
        if self.metrics is not None:
            self.metrics.record_request(timeframe.label, success=success, latency_ms=timer.elapsed_ms(), range_retries=len(history) - 1)

    async def fetch(
        self,
        instrument_key: str,
        timeframe: Timeframe,
        to_date: date,
        from_date: date | None = None,
    ) -> list[Candle]:
        self._check_limits(timeframe, to_date, from_date)

        timer = RequestTimer()
        attempt = FetchAttempt(number=0, from_date=from_date, to_date=to_date)
        history: list[FetchAttempt] = []
        last_error: RangeTooWideError | None = None

        while attempt.number <= self.max_retries:
            history.append(attempt)
            logger.info(f"Attempt {attempt.number + 1}/{self.max_retries + 1}: {instrument_key} {timeframe.key} {attempt.from_date} -> {attempt.to_date}")
            try:
                candles = await self.provider.fetch_candles(instrument_key, timeframe, attempt.to_date, attempt.from_date)
            except RangeTooWideError as exc:
                last_error = exc
                if attempt.from_date is None or attempt.number >= self.max_retries:
                    break
                next_attempt = attempt.shrink(self.shrink_days)
                logger.warning(
                    f"Retry {next_attempt.number}: invalid date range, reducing range by {self.shrink_days} days",
                    extra={
                        "requested_range": f"{from_date} to {to_date} ({history[0].span_days} days)",
                        "new_range": f"{next_attempt.from_date} to {to_date} ({next_attempt.span_days} days)",
                    },
                )
                await self._sleep(self.backoff_seconds)
                attempt = next_attempt
                continue
            except UpstreamFailure:
                self._record(timeframe, False, timer, history)
                raise

            logger.info(f"Request succeeded on attempt {attempt.number + 1} with {len(candles)} candles")
            self._record(timeframe, True, timer, history)
            return candles

        self._record(timeframe, False, timer, history)
        shrunk = (len(history) - 1) * self.shrink_days
        logger.error(f"All {len(history)} attempts failed for {instrument_key} {timeframe.key}")
        raise RetriesExhaustedError(
            f"Invalid date range after {len(history)} attempts. "
            f"Reduced by {shrunk} days but still too large; try a smaller date range.",
            status_code=last_error.status_code if last_error else 400,
        ) from last_error
