from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from time import perf_counter


@dataclass
class TimeframeMetrics:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    range_retries: int = 0
    chunk_failures: int = 0
    latency_total_ms: float = 0.0

    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.latency_total_ms / self.total_requests


class MetricsCollector:
    """Upstream fetch counters keyed by timeframe label (``1d``, ``4h`` ...)."""

    def __init__(self):
        self._per_timeframe: dict[str, TimeframeMetrics] = {}
        self._lock = Lock()

    def _get(self, timeframe: str) -> TimeframeMetrics:
        if timeframe not in self._per_timeframe:
            self._per_timeframe[timeframe] = TimeframeMetrics()
        return self._per_timeframe[timeframe]

    def record_request(self, timeframe: str, success: bool, latency_ms: float, range_retries: int = 0):
        with self._lock:
            m = self._get(timeframe)
            m.total_requests += 1
            m.latency_total_ms += max(latency_ms, 0.0)
            m.range_retries += max(range_retries, 0)
            if success:
                m.successful_requests += 1
            else:
                m.failed_requests += 1

    def record_chunk_failure(self, timeframe: str):
        with self._lock:
            self._get(timeframe).chunk_failures += 1

    def timeframe_status(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            out: dict[str, dict[str, float | int]] = {}
            for tf, m in self._per_timeframe.items():
                failure_rate = 0.0 if m.total_requests == 0 else (m.failed_requests / m.total_requests)
                out[tf] = {
                    "total_requests": m.total_requests,
                    "successful_requests": m.successful_requests,
                    "failed_requests": m.failed_requests,
                    "range_retries": m.range_retries,
                    "chunk_failures": m.chunk_failures,
                    "failure_rate": round(failure_rate, 4),
                    "average_latency_ms": round(m.avg_latency_ms(), 3),
                }
            return out

    def global_metrics(self) -> dict[str, float | int | dict]:
        per = self.timeframe_status()
        total_requests = sum(v["total_requests"] for v in per.values())
        total_failed = sum(v["failed_requests"] for v in per.values())
        weighted_latency = sum((v["average_latency_ms"] * v["total_requests"]) for v in per.values())
        average_latency = 0.0 if total_requests == 0 else (weighted_latency / total_requests)
        return {
            "request_count": total_requests,
            "failure_count": total_failed,
            "range_retries": sum(v["range_retries"] for v in per.values()),
            "chunk_failures": sum(v["chunk_failures"] for v in per.values()),
            "average_latency_ms": round(average_latency, 3),
            "per_timeframe": per,
        }


class RequestTimer:
    """Small helper for request timing."""

    def __init__(self):
        self._started = perf_counter()

    def elapsed_ms(self) -> float:
        return (perf_counter() - self._started) * 1000
