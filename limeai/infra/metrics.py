# limeai/infra/metrics.py
from __future__ import annotations

import threading
import time
from collections import Counter, deque
from statistics import median

from limeai.metrics import ADMISSION_COOLDOWN, GENERATION_OUTCOMES_TOTAL

OUTCOMES = ("api", "cache_hit", "fallback_quota", "fallback_error")


class GenerationMetrics:
    """
    Thread-safe in-memory metrics for generation endpoints:
      - counters by (endpoint, outcome): api | cache_hit | fallback_quota | fallback_error
      - latency samples (ms) per outcome + overall (capped reservoir)
    """

    def __init__(self, max_samples: int = 1000):
        self._lock = threading.Lock()
        self._counters = Counter()  # outcome -> n
        self._by_endpoint = Counter()  # (endpoint, outcome) -> n
        self._overall_lat: deque[int] = deque(maxlen=max_samples)
        self._by_outcome_lat: dict[str, deque[int]] = {
            k: deque(maxlen=max_samples) for k in OUTCOMES
        }
        self._started_at = time.time()

    def record(self, endpoint: str, outcome: str, elapsed_ms: int | None = None) -> None:
        with self._lock:
            self._counters[outcome] += 1
            self._by_endpoint[(endpoint, outcome)] += 1
            if elapsed_ms is not None:
                self._overall_lat.append(elapsed_ms)
                if outcome in self._by_outcome_lat:
                    self._by_outcome_lat[outcome].append(elapsed_ms)

    @staticmethod
    def _percentile(samples: list[int], p: float) -> int | None:
        if not samples:
            return None
        k = max(0, min(len(samples) - 1, int(round((p / 100.0) * (len(samples) - 1)))))
        return sorted(samples)[k]

    def _lat_summary(self, samples: deque[int]) -> dict[str, int | None]:
        data = list(samples)
        if not data:
            return {"count": 0, "p50": None, "p95": None, "max": None}
        return {
            "count": len(data),
            "p50": int(median(data)),
            "p95": self._percentile(data, 95),
            "max": max(data),
        }

    def snapshot(self) -> dict:
        with self._lock:
            endpoints: dict[str, dict[str, int]] = {}
            for (endpoint, outcome), n in self._by_endpoint.items():
                endpoints.setdefault(endpoint, {})[outcome] = n
            return {
                "as_of": int(time.time()),
                "uptime_seconds": int(time.time() - self._started_at),
                "counters": dict(self._counters),
                "endpoints": endpoints,
                "latency": {
                    "overall": self._lat_summary(self._overall_lat),
                    "by_outcome": {k: self._lat_summary(v) for k, v in self._by_outcome_lat.items()},
                },
            }


# singletons are fine for this simple service
metrics = GenerationMetrics()


def observe(endpoint: str, outcome: str, elapsed_ms: int, in_cooldown: bool) -> None:
    """Record one generation response in both the in-process and Prometheus views."""
    metrics.record(endpoint, outcome, elapsed_ms=elapsed_ms)
    GENERATION_OUTCOMES_TOTAL.labels(endpoint=endpoint, source=outcome).inc()
    ADMISSION_COOLDOWN.set(1 if in_cooldown else 0)
