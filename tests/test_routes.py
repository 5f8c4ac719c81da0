import asyncio
import json
from datetime import datetime, timedelta

from fastapi.exceptions import RequestValidationError

from swingpoints.api import routes
from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import ONE_DAY
from swingpoints.errors import UpstreamFailure
from swingpoints.providers.base import CandleProvider
from swingpoints.resilience_range_retry import ResilientClient
from swingpoints.schemas.request import CalculateRequest
from swingpoints.services.chunked_fetcher import ChunkedFetcher
from swingpoints.services.historical_service import HistoricalService
from swingpoints.services.swing_service import SwingService


async def no_sleep(_):
    return None


class PeakProvider(CandleProvider):
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    async def fetch_candles(self, instrument_key, timeframe, to_date, from_date=None):
        self.calls += 1
        if self.error:
            raise self.error
        if timeframe != ONE_DAY:
            return []
        candles = []
        for i in range(20):
            high = 100 + i if i <= 10 else 120 - i
            ts = (datetime(2023, 1, 2) + timedelta(days=i)).isoformat() + "+05:30"
            candles.append(Candle(timestamp=ts, open=high - 1, high=high, low=high - 2, close=high - 0.5, volume=10))
        return list(reversed(candles))


def use_provider(monkeypatch, provider):
    client = ResilientClient(provider, sleep=no_sleep)
    service = SwingService(HistoricalService(client, ChunkedFetcher(client, sleep=no_sleep)), window=5)
    monkeypatch.setattr(routes, "swing_service", service)


def call(payload):
    response = asyncio.run(routes.calculate(CalculateRequest.model_validate(payload)))
    return response.status_code, json.loads(response.body)


def test_health_payload():
    payload = routes.health()
    assert payload["status"] == "ok"
    assert "timestamp" in payload


def test_root_lists_endpoints():
    payload = routes.root()
    assert payload["endpoints"]["swingPoints"] == "/api/swing-points/calculate"


def test_missing_required_fields_is_400(monkeypatch):
    provider = PeakProvider()
    use_provider(monkeypatch, provider)

    status, body = call({"companyName": "Test Co", "timeFrameSelection": {"daySwings": True}})
    assert status == 400
    assert body == {"error": "instrumentKey and companyName are required"}

    status, body = call({"instrumentKey": "NSE_EQ|TEST", "companyName": "  "})
    assert status == 400
    assert provider.calls == 0


def test_invalid_from_date_is_400(monkeypatch):
    use_provider(monkeypatch, PeakProvider())
    status, body = call({"instrumentKey": "NSE_EQ|TEST", "companyName": "Test Co", "fromDate": "not-a-date"})
    assert status == 400
    assert "invalid date" in body["error"]


def test_calculate_returns_camel_case_payload(monkeypatch):
    use_provider(monkeypatch, PeakProvider())
    status, body = call(
        {
            "instrumentKey": "NSE_EQ|TEST",
            "companyName": "Test Co",
            "fromDate": "2023-01-01",
            "timeFrameSelection": {"min15": False, "hour1": True, "hour4": False, "daySwings": True},
        }
    )

    assert status == 200
    assert body["success"] is True
    data = body["data"]
    assert data["instrumentKey"] == "NSE_EQ|TEST"
    assert data["companyName"] == "Test Co"
    assert data["timeframe"] == 1
    assert data["swingPoints1H"] is None
    assert data["swingPoints4H"] is None
    assert data["swingPoints15Min"] is None

    (point,) = data["swingPointsDay"]
    assert point["label"] == "SwingHigh"
    assert point["price"] == 110
    assert point["timestamp"] == "2023-01-12T00:00:00"
    assert point["candle"]["timestamp"] == "2023-01-12T00:00:00"
    assert point["candle"]["isSwingHigh"] is True
    assert point["candle"]["isSwingLow"] is False
    assert point["candle"]["openInterest"] == 0


def test_nothing_selected_returns_null_data(monkeypatch):
    provider = PeakProvider()
    use_provider(monkeypatch, provider)
    status, body = call({"instrumentKey": "NSE_EQ|TEST", "companyName": "Test Co", "fromDate": "2023-01-01"})
    assert status == 200
    assert body == {"success": True, "data": None}
    assert provider.calls == 0


def test_upstream_failure_is_opaque_500(monkeypatch):
    use_provider(monkeypatch, PeakProvider(error=UpstreamFailure("Invalid token used to access API", status_code=401)))
    status, body = call(
        {"instrumentKey": "NSE_EQ|TEST", "companyName": "Test Co", "fromDate": "2023-01-01", "timeFrameSelection": {"day1": True}}
    )
    assert status == 500
    assert body == {"error": "Failed to calculate swing points"}


def test_day1_alias_selects_daily():
    request = CalculateRequest.model_validate({"instrumentKey": "X", "companyName": "Y", "timeFrameSelection": {"day1": True}})
    selection = request.selection()
    assert selection.one_day is True
    assert selection.one_hour is False


def test_validation_errors_map_to_400():
    exc = RequestValidationError([{"loc": ("body", "instrumentKey"), "msg": "Input should be a valid string", "type": "string_type"}])
    response = asyncio.run(routes.validation_exception_handler(None, exc))
    assert response.status_code == 400
    assert json.loads(response.body) == {"error": "instrumentKey: Input should be a valid string"}


def test_metrics_endpoint_shape():
    payload = routes.all_metrics()
    assert "request_count" in payload
    assert "per_timeframe" in payload


def test_create_app_registers_routes():
    app = routes.create_app()
    paths = {route.path for route in app.routes}
    assert {"/", "/health", "/metrics", "/api/swing-points/calculate"} <= paths
