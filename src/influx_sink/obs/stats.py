"""Processing counters and latency accounting."""

from __future__ import annotations

import math
import time
from collections import Counter, deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from threading import Lock


class SinkOutcome(str, Enum):
    WRITTEN = "written"
    NOTHING_TO_WRITE = "nothing_to_write"
    REJECTED = "rejected"
    STORE_FAILED = "store_failed"


@dataclass(slots=True)
class Measurement:
    """Outcome slot filled in while a `SinkStats.measure()` block runs."""

    outcome: SinkOutcome = SinkOutcome.REJECTED


class SinkStats:
    """In-memory counters for API-level observability.

    Latency figures cover the latest `window` events only; the outcome
    counters cover everything since startup.
    """

    def __init__(self, window: int = 1000) -> None:
        self._outcomes: Counter[SinkOutcome] = Counter()
        self._latencies_ms: deque[float] = deque(maxlen=window)
        self._lock = Lock()

    def record(self, outcome: SinkOutcome, latency_ms: float) -> None:
        with self._lock:
            self._outcomes[outcome] += 1
            self._latencies_ms.append(latency_ms)

    @contextmanager
    def measure(self) -> Iterator[Measurement]:
        """Time the block and record its outcome on exit.

        A block that raises keeps the default outcome, `REJECTED`.
        """

        measurement = Measurement()
        started = time.perf_counter()
        try:
            yield measurement
        finally:
            self.record(measurement.outcome, (time.perf_counter() - started) * 1000.0)

    def summary(self) -> dict[str, float | int]:
        with self._lock:
            outcomes = dict(self._outcomes)
            latencies = sorted(self._latencies_ms)

        summary: dict[str, float | int] = {"total_events": sum(outcomes.values())}
        for outcome in SinkOutcome:
            summary[f"total_{outcome.value}"] = outcomes.get(outcome, 0)
        summary["avg_latency_ms"] = sum(latencies) / len(latencies) if latencies else 0.0
        summary["p95_latency_ms"] = _nearest_rank(latencies, 0.95)
        return summary


def _nearest_rank(ordered: list[float], quantile: float) -> float:
    if not ordered:
        return 0.0
    rank = math.ceil(quantile * len(ordered))
    return ordered[max(rank, 1) - 1]
