"""Tests for metrics infrastructure."""

import pytest

from helm.observability import (
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
    get_metrics,
    reset_metrics,
)


class TestCounter:
    """Tests for Counter."""

    def test_increment(self):
        counter = Counter("test")
        counter.inc()
        counter.inc(2)
        assert counter.value == 3

    def test_cannot_decrease(self):
        with pytest.raises(ValueError):
            Counter("test").inc(-1)

    def test_reset(self):
        counter = Counter("test")
        counter.inc(5)
        counter.reset()
        assert counter.value == 0


class TestGauge:
    """Tests for Gauge."""

    def test_up_and_down(self):
        gauge = Gauge("test")
        gauge.inc(3)
        gauge.dec()
        assert gauge.value == 2
        gauge.set(10)
        assert gauge.value == 10


class TestHistogram:
    """Tests for Histogram."""

    def test_empty(self):
        assert Histogram("test").to_dict() == {"count": 0, "avg": 0.0, "min": 0.0, "max": 0.0}

    def test_observations(self):
        histogram = Histogram("test")
        for value in (0.2, 0.6, 1.0):
            histogram.observe(value)
        assert histogram.count == 3
        assert histogram.avg == pytest.approx(0.6)
        assert histogram.min == 0.2
        assert histogram.max == 1.0


class TestRegistry:
    """Tests for MetricsRegistry."""

    def test_record_outcome(self):
        registry = MetricsRegistry()
        registry.record_outcome("approved", 0.9)
        registry.record_outcome("rejected", 0.1)
        data = registry.to_dict()["evaluations"]
        assert data["total"] == 2
        assert data["approved"] == 1
        assert data["rejected"] == 1
        assert data["score"]["avg"] == pytest.approx(0.5)

    def test_registries_are_independent(self):
        a, b = MetricsRegistry(), MetricsRegistry()
        a.tasks_created.inc()
        assert b.tasks_created.value == 0

    def test_reset_covers_everything(self):
        registry = MetricsRegistry()
        registry.record_outcome("modified", 0.5)
        registry.live_tasks.inc(4)
        registry.reset()
        data = registry.to_dict()
        assert data["evaluations"]["total"] == 0
        assert data["evaluations"]["score"]["count"] == 0
        assert data["tasks"]["live"] == 0

    def test_global_registry(self):
        get_metrics().goals_blocked.inc()
        assert get_metrics().to_dict()["tasks"]["goals_blocked"] == 1
        reset_metrics()
        assert get_metrics().goals_blocked.value == 0
