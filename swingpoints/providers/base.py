from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import Timeframe


class CandleProvider(ABC):
    """Source of historical candles. One call is one upstream request.

    Implementations return candles newest first and raise
    :class:`~swingpoints.errors.RangeTooWideError` when the upstream rejects
    the span, or another :class:`~swingpoints.errors.UpstreamFailure`.
    """

    name: str = ""

    @abstractmethod
    async def fetch_candles(
        self,
        instrument_key: str,
        timeframe: Timeframe,
        to_date: date,
        from_date: date | None = None,
    ) -> list[Candle]:
        raise NotImplementedError
