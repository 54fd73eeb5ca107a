"""
Orchestrator — Alignment-gated task lifecycle.

Usage:
    from helm.orchestrator import create_orchestrator

    orchestrator = create_orchestrator(gate)
    snapshot = orchestrator.orchestrate(context)
    print(f"Pending: {len(snapshot.pending)}, blocked: {snapshot.blocked_goals}")
"""

from helm.orchestrator.task import (
    LEGAL_TRANSITIONS,
    is_legal_transition,
    TaskTransition,
    Task,
)
from helm.orchestrator.orchestrator import (
    OrchestratorConfig,
    OrchestrationSnapshot,
    TaskOrchestrator,
    create_orchestrator,
)

__all__ = [
    # Task
    "LEGAL_TRANSITIONS",
    "is_legal_transition",
    "TaskTransition",
    "Task",
    # Orchestrator
    "OrchestratorConfig",
    "OrchestrationSnapshot",
    "TaskOrchestrator",
    "create_orchestrator",
]
