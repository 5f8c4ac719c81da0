from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from swingpoints.config.settings import settings
from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import Timeframe
from swingpoints.errors import MalformedResponseError, MissingCredentialError, RangeTooWideError, UpstreamFailure
from swingpoints.providers.base import CandleProvider
from swingpoints.utils.validators import strip_timezone, to_native_int, to_price

logger = logging.getLogger(__name__)

INVALID_DATE_RANGE_MESSAGE = "Invalid date range"


def build_historical_url(base_url: str, instrument_key: str, timeframe: Timeframe, to_date: date, from_date: date | None = None) -> str:
    url = f"{base_url.rstrip('/')}/historical-candle/{quote(instrument_key, safe='')}/{timeframe.unit.value}/{timeframe.interval}/{to_date.isoformat()}"
    if from_date:
        url += f"/{from_date.isoformat()}"
    return url


def _error_message(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    if body.get("message"):
        return str(body["message"])
    for item in body.get("errors") or []:
        if isinstance(item, dict) and item.get("message"):
            return str(item["message"])
    return ""


def parse_candle_row(row: Any) -> Candle:
    if not isinstance(row, (list, tuple)) or len(row) < 6:
        raise MalformedResponseError(f"unexpected candle row: {row!r}")
    timestamp, open_, high, low, close, volume = row[:6]
    open_interest = row[6] if len(row) > 6 else 0
    try:
        prices = [to_price(value) for value in (open_, high, low, close)]
    except ValueError as exc:
        raise MalformedResponseError(f"bad price in candle row {row!r}: {exc}") from exc
    return Candle(
        timestamp=strip_timezone(timestamp),
        open=prices[0],
        high=prices[1],
        low=prices[2],
        close=prices[3],
        volume=max(to_native_int(volume), 0),
        open_interest=max(to_native_int(open_interest), 0),
    )


class UpstoxAdapter(CandleProvider):
    """Upstox v3 historical-candle client. Each call is a single GET."""

    name = "upstox"

    def __init__(self, access_token: str | None = None, base_url: str | None = None, timeout_seconds: float | None = None):
        self.access_token = settings.upstox_access_token if access_token is None else access_token
        self.base_url = base_url or settings.upstox_base_url
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Authorization": f"Bearer {self.access_token}"}

    def _get_json(self, url: str) -> dict[str, Any]:
        request = Request(url, headers=self._headers())
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8")
        except HTTPError as exc:
            try:
                body = json.loads(exc.read().decode("utf-8") or "{}")
            except (ValueError, OSError):
                body = {}
            message = _error_message(body) or str(exc.reason)
            if exc.code == 400 and message == INVALID_DATE_RANGE_MESSAGE:
                raise RangeTooWideError(message, status_code=400) from exc
            raise UpstreamFailure(message, status_code=exc.code) from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise UpstreamFailure(f"request failed: {exc}") from exc

        try:
            return json.loads(raw)
        except ValueError as exc:
            raise MalformedResponseError("response is not valid JSON") from exc

    async def fetch_candles(
        self,
        instrument_key: str,
        timeframe: Timeframe,
        to_date: date,
        from_date: date | None = None,
    ) -> list[Candle]:
        if not self.access_token:
            raise MissingCredentialError("Upstox access token not provided")

        url = build_historical_url(self.base_url, instrument_key, timeframe, to_date, from_date)
        logger.info(
            "upstox_request",
            extra={"url": url, "token_prefix": self.access_token[:6] + "..."},
        )
        payload = await asyncio.to_thread(self._get_json, url)

        if not isinstance(payload, dict) or payload.get("status") != "success":
            status = payload.get("status") if isinstance(payload, dict) else None
            raise UpstreamFailure(f"API request failed: {status or 'Unknown error'}")

        data = payload.get("data")
        rows = data.get("candles") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise MalformedResponseError("response has no data.candles list")

        candles = [parse_candle_row(row) for row in rows]
        logger.info(f"Fetched {len(candles)} {timeframe.label} candles for {instrument_key}")
        return candles
