"""
Gate — Alignment gating for behavior changes and goals.

Provides:
- AlignmentGate: scoring + ledger writes + outcome classification
- GateConfig: thresholds, windows, floors
- IntegrityMetrics / IntegrityReport: derived integrity views
"""

from helm.gate.gate import (
    GateConfig,
    IntegrityMetrics,
    IntegrityReport,
    AlignmentGate,
    create_gate,
)

__all__ = [
    "GateConfig",
    "IntegrityMetrics",
    "IntegrityReport",
    "AlignmentGate",
    "create_gate",
]
