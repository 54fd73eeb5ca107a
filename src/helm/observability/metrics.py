"""
Metrics — Operational counters for the alignment core.

These are process-wide counters for monitoring. They are separate from
IntegrityMetrics, which the gate derives from its ledger on every call.
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Any


class Counter:
    """Monotonically increasing counter."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._value = 0.0
        self._lock = Lock()

    def inc(self, amount: float = 1.0) -> None:
        """Increment counter."""
        if amount < 0:
            raise ValueError(f"Counter {self.name} cannot decrease")
        with self._lock:
            self._value += amount

    @property
    def value(self) -> float:
        return self._value

    def reset(self) -> None:
        """Reset counter (for testing)."""
        with self._lock:
            self._value = 0.0


class Gauge:
    """Value that can go up and down."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._value = 0.0
        self._lock = Lock()

    def set(self, value: float) -> None:
        with self._lock:
            self._value = value

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    def dec(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value -= amount

    @property
    def value(self) -> float:
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0.0


class Histogram:
    """
    Tracks count, sum, min and max of observed values.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._count = 0
        self._sum = 0.0
        self._min = float("inf")
        self._max = float("-inf")
        self._lock = Lock()

    def observe(self, value: float) -> None:
        """Record an observation."""
        with self._lock:
            self._count += 1
            self._sum += value
            self._min = min(self._min, value)
            self._max = max(self._max, value)

    @property
    def count(self) -> int:
        return self._count

    @property
    def avg(self) -> float:
        if self._count == 0:
            return 0.0
        return self._sum / self._count

    @property
    def min(self) -> float:
        return self._min if self._count > 0 else 0.0

    @property
    def max(self) -> float:
        return self._max if self._count > 0 else 0.0

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            self._sum = 0.0
            self._min = float("inf")
            self._max = float("-inf")

    def to_dict(self) -> dict[str, float]:
        return {
            "count": self._count,
            "avg": self.avg,
            "min": self.min,
            "max": self.max,
        }


def _counter(name: str, description: str):
    return field(default_factory=lambda: Counter(name, description))


@dataclass
class MetricsRegistry:
    """
    Registry for all HELM operational metrics.
    """
    # Evaluation metrics
    evaluations_total: Counter = _counter("evaluations_total", "Evaluations recorded")
    decisions_approved: Counter = _counter("decisions_approved", "Approved decisions")
    decisions_modified: Counter = _counter("decisions_modified", "Modified decisions")
    decisions_rejected: Counter = _counter("decisions_rejected", "Rejected decisions")
    invalid_inputs: Counter = _counter("invalid_inputs", "Evaluations refused as malformed")
    ledger_evictions: Counter = _counter("ledger_evictions", "Decisions evicted from the ledger")
    alignment_score: Histogram = field(
        default_factory=lambda: Histogram("alignment_score", "Per-evaluation alignment score")
    )

    # Integrity metrics
    integrity_checks: Counter = _counter("integrity_checks", "Integrity sweeps run")
    integrity_failures: Counter = _counter("integrity_failures", "Integrity sweeps with issues")

    # Task metrics
    tasks_created: Counter = _counter("tasks_created", "Tasks created")
    tasks_admitted: Counter = _counter("tasks_admitted", "Tasks admitted to in-progress")
    tasks_completed: Counter = _counter("tasks_completed", "Tasks completed")
    tasks_failed: Counter = _counter("tasks_failed", "Tasks failed")
    tasks_cancelled: Counter = _counter("tasks_cancelled", "Tasks cancelled")
    invalid_transitions: Counter = _counter("invalid_transitions", "Rejected task transitions")
    goals_blocked: Counter = _counter("goals_blocked", "Goals blocked by a rejected decision")

    # Active state
    live_tasks: Gauge = field(
        default_factory=lambda: Gauge("live_tasks", "Pending plus in-progress tasks")
    )

    def record_outcome(self, outcome: str, score: float) -> None:
        """Count one recorded decision."""
        self.evaluations_total.inc()
        self.alignment_score.observe(score)
        counter = {
            "approved": self.decisions_approved,
            "modified": self.decisions_modified,
            "rejected": self.decisions_rejected,
        }.get(outcome)
        if counter is not None:
            counter.inc()

    def to_dict(self) -> dict[str, Any]:
        """Export all metrics as dict."""
        return {
            "evaluations": {
                "total": self.evaluations_total.value,
                "approved": self.decisions_approved.value,
                "modified": self.decisions_modified.value,
                "rejected": self.decisions_rejected.value,
                "invalid_inputs": self.invalid_inputs.value,
                "ledger_evictions": self.ledger_evictions.value,
                "score": self.alignment_score.to_dict(),
            },
            "integrity": {
                "checks": self.integrity_checks.value,
                "failures": self.integrity_failures.value,
            },
            "tasks": {
                "created": self.tasks_created.value,
                "admitted": self.tasks_admitted.value,
                "completed": self.tasks_completed.value,
                "failed": self.tasks_failed.value,
                "cancelled": self.tasks_cancelled.value,
                "invalid_transitions": self.invalid_transitions.value,
                "goals_blocked": self.goals_blocked.value,
                "live": self.live_tasks.value,
            },
        }

    def reset(self) -> None:
        """Reset all metrics (for testing)."""
        for value in vars(self).values():
            if isinstance(value, (Counter, Gauge, Histogram)):
                value.reset()


# Global metrics registry
_metrics = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get global metrics registry."""
    return _metrics


def reset_metrics() -> None:
    """Reset all metrics (for testing)."""
    _metrics.reset()
