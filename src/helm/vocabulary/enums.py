"""
Vocabulary enums — the shared language of the alignment core.

All enumerated types referenced by decisions, tasks, and the value model.
"""

from enum import Enum


# =============================================================================
# DECISIONS
# =============================================================================

class DecisionKind(str, Enum):
    """
    What was evaluated.

    Both kinds share one scoring pipeline; only post-processing differs
    (goal filters may receive an adjusted priority).
    """
    BEHAVIOR_CHANGE = "behavior_change"
    GOAL_FILTER = "goal_filter"


class DecisionOutcome(str, Enum):
    """
    Classification of an alignment score.

    REJECTED is a successful policy judgment, not an error.
    """
    APPROVED = "approved"
    MODIFIED = "modified"
    REJECTED = "rejected"


class Severity(str, Enum):
    """
    Caller-supplied severity of a proposed behavior change.

    Scales risk penalties: LOW halves them, HIGH doubles them.
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: "Severity | str | None") -> "Severity":
        """
        Coerce a caller value to a Severity.

        Accepts enum members, their values (case-insensitive), None, and the
        legacy minor/moderate/major labels. Raises ValueError otherwise.
        """
        if value is None:
            return cls.UNSPECIFIED
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if not key:
            return cls.UNSPECIFIED
        if key in SEVERITY_ALIASES:
            return SEVERITY_ALIASES[key]
        return cls(key)


SEVERITY_ALIASES: dict[str, Severity] = {
    "minor": Severity.LOW,
    "moderate": Severity.MEDIUM,
    "major": Severity.HIGH,
}


# =============================================================================
# VALUE MODEL
# =============================================================================

class GoalStatus(str, Enum):
    """Lifecycle status of a strategic goal."""
    PROPOSED = "proposed"
    ACTIVE = "active"
    RETIRED = "retired"


# =============================================================================
# TASKS
# =============================================================================

class TaskState(str, Enum):
    """
    Task lifecycle states.

    COMPLETED, FAILED and CANCELLED are terminal.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    TaskState.COMPLETED,
    TaskState.FAILED,
    TaskState.CANCELLED,
})
