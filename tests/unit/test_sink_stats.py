import pytest

from influx_sink.obs.stats import SinkOutcome, SinkStats


def test_summary_counts_outcomes_and_latency() -> None:
    stats = SinkStats()

    stats.record(SinkOutcome.WRITTEN, 2.0)
    stats.record(SinkOutcome.WRITTEN, 4.0)
    stats.record(SinkOutcome.NOTHING_TO_WRITE, 1.0)
    stats.record(SinkOutcome.REJECTED, 3.0)

    summary = stats.summary()

    assert summary["total_events"] == 4
    assert summary["total_written"] == 2
    assert summary["total_nothing_to_write"] == 1
    assert summary["total_rejected"] == 1
    assert summary["total_store_failed"] == 0
    assert summary["avg_latency_ms"] == 2.5


def test_empty_summary_and_latency_window() -> None:
    stats = SinkStats(window=2)
    assert stats.summary()["avg_latency_ms"] == 0.0
    assert stats.summary()["p95_latency_ms"] == 0.0

    for latency in (100.0, 1.0, 3.0):
        stats.record(SinkOutcome.WRITTEN, latency)

    assert stats.summary()["avg_latency_ms"] == 2.0
    assert stats.summary()["total_events"] == 3


def test_p95_uses_nearest_rank() -> None:
    stats = SinkStats()
    for latency in range(1, 21):
        stats.record(SinkOutcome.WRITTEN, float(latency))

    assert stats.summary()["p95_latency_ms"] == 19.0

    single = SinkStats()
    single.record(SinkOutcome.WRITTEN, 7.0)
    assert single.summary()["p95_latency_ms"] == 7.0


def test_measure_records_the_assigned_outcome() -> None:
    stats = SinkStats()

    with stats.measure() as measurement:
        measurement.outcome = SinkOutcome.WRITTEN

    summary = stats.summary()
    assert summary["total_written"] == 1
    assert summary["avg_latency_ms"] >= 0.0


def test_measure_counts_a_raising_block_as_rejected() -> None:
    stats = SinkStats()

    with pytest.raises(ValueError):
        with stats.measure():
            raise ValueError("bad event")

    assert stats.summary()["total_rejected"] == 1
