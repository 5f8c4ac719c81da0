import asyncio
from datetime import date, timedelta

import pytest

from swingpoints.domain.candle import Candle
from swingpoints.domain.timeframe import ONE_DAY
from swingpoints.errors import MissingCredentialError, RangeTooWideError, RetriesExhaustedError, UpstreamFailure
from swingpoints.internal_metrics import MetricsCollector
from swingpoints.providers.base import CandleProvider
from swingpoints.resilience_range_retry import FetchAttempt, ResilientClient

FROM = date(2023, 1, 1)
TO = date(2024, 1, 1)
CANDLES = [Candle(timestamp="2023-12-29T00:00:00", open=1, high=2, low=0.5, close=1.5, volume=10)]


class ScriptedProvider(CandleProvider):
    """Plays back outcomes in order; the last outcome repeats."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def fetch_candles(self, instrument_key, timeframe, to_date, from_date=None):
        self.calls.append((to_date, from_date))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if outcome == "range":
            raise RangeTooWideError("Invalid date range", status_code=400)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def test_two_range_errors_then_success():
    provider = ScriptedProvider(["range", "range", CANDLES])
    sleep = SleepRecorder()
    client = ResilientClient(provider, max_retries=3, shrink_days=10, backoff_seconds=1.0, sleep=sleep)

    candles = asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO, FROM))

    assert candles == CANDLES
    assert len(provider.calls) == 3
    assert provider.calls[0] == (TO, FROM)
    assert provider.calls[1] == (TO, FROM + timedelta(days=10))
    assert provider.calls[2] == (TO, FROM + timedelta(days=20))
    assert sleep.delays == [1.0, 1.0]


def test_always_range_error_stops_after_max_retries_plus_one():
    provider = ScriptedProvider(["range"])
    client = ResilientClient(provider, max_retries=3, shrink_days=10, sleep=SleepRecorder())

    with pytest.raises(RetriesExhaustedError) as exc_info:
        asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO, FROM))

    assert len(provider.calls) == 4
    assert provider.calls[-1][1] == FROM + timedelta(days=30)
    assert "30 days" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RangeTooWideError)


def test_other_upstream_errors_are_not_retried():
    provider = ScriptedProvider([UpstreamFailure("Unauthorized", status_code=401)])
    sleep = SleepRecorder()
    client = ResilientClient(provider, sleep=sleep)

    with pytest.raises(UpstreamFailure) as exc_info:
        asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO, FROM))

    assert not isinstance(exc_info.value, RetriesExhaustedError)
    assert exc_info.value.status_code == 401
    assert len(provider.calls) == 1
    assert sleep.delays == []


def test_range_error_without_from_date_cannot_shrink():
    provider = ScriptedProvider(["range", CANDLES])
    client = ResilientClient(provider, sleep=SleepRecorder())

    with pytest.raises(RetriesExhaustedError):
        asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO))
    assert len(provider.calls) == 1


def test_missing_credential_propagates_unchanged():
    provider = ScriptedProvider([MissingCredentialError("no token")])
    client = ResilientClient(provider, sleep=SleepRecorder())

    with pytest.raises(MissingCredentialError):
        asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO, FROM))


def test_metrics_record_retries_and_outcome():
    metrics = MetricsCollector()
    provider = ScriptedProvider(["range", CANDLES])
    client = ResilientClient(provider, metrics=metrics, sleep=SleepRecorder())

    asyncio.run(client.fetch("NSE_EQ|TEST", ONE_DAY, TO, FROM))

    status = metrics.timeframe_status()["1d"]
    assert status["total_requests"] == 1
    assert status["successful_requests"] == 1
    assert status["range_retries"] == 1


def test_fetch_attempt_shrink_is_immutable():
    first = FetchAttempt(number=0, from_date=FROM, to_date=TO)
    second = first.shrink(10)
    assert first.from_date == FROM
    assert second.number == 1
    assert second.from_date == FROM + timedelta(days=10)
    assert second.span_days == first.span_days - 10
