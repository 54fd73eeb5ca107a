"""
Vocabulary — Enumerated types forming the shared language of the system.

All enums referenced by decisions, tasks, and the value model are defined here.
"""

from helm.vocabulary.enums import (
    # Decisions
    DecisionKind,
    DecisionOutcome,
    Severity,
    SEVERITY_ALIASES,
    # Value model
    GoalStatus,
    # Tasks
    TaskState,
    TERMINAL_STATES,
)

__all__ = [
    # Decisions
    "DecisionKind",
    "DecisionOutcome",
    "Severity",
    "SEVERITY_ALIASES",
    # Value model
    "GoalStatus",
    # Tasks
    "TaskState",
    "TERMINAL_STATES",
]
