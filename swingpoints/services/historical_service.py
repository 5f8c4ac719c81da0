from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import DateRange, Timeframe
from swingpoints.resilience_range_retry import ResilientClient
from swingpoints.services.chunked_fetcher import ChunkedFetcher


class HistoricalService:
    """Routes a timeframe to a single call (daily and above) or to chunked fetching (intraday)."""

    def __init__(self, client: ResilientClient, chunked_fetcher: ChunkedFetcher):
        self.client = client
        self.chunked_fetcher = chunked_fetcher

    async def get_historical(self, instrument_key: str, timeframe: Timeframe, date_range: DateRange) -> list[Candle]:
        if timeframe.is_intraday:
            return await self.chunked_fetcher.fetch_in_chunks(instrument_key, timeframe, date_range)
        return await self.client.fetch(instrument_key, timeframe, date_range.to_date, date_range.from_date)
