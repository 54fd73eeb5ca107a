"""
Observability — Logging and metrics for HELM.

Provides:
- Structured logging with session and decision IDs
- Operational metrics (counters, gauges, histograms)
"""

from helm.observability.logging import (
    get_decision_id,
    set_session_id,
    get_session_id,
    configure_logging,
    get_logger,
    LogContext,
    JSONFormatter,
    ReadableFormatter,
)
from helm.observability.metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
    get_metrics,
    reset_metrics,
)

__all__ = [
    # Logging
    "get_decision_id",
    "set_session_id",
    "get_session_id",
    "configure_logging",
    "get_logger",
    "LogContext",
    "JSONFormatter",
    "ReadableFormatter",
    # Metrics
    "Counter",
    "Gauge",
    "Histogram",
    "MetricsRegistry",
    "get_metrics",
    "reset_metrics",
]
