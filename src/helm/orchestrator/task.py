"""
Task — A unit of agent work and its lifecycle state machine.

    pending -> in_progress -> completed
                           -> failed
    pending | in_progress  -> cancelled

Terminal states have no way out. Every transition appends to the task's
history with a strictly increasing timestamp.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from helm.errors import InvalidTransitionError
from helm.vocabulary import DecisionOutcome, TaskState


# =============================================================================
# TRANSITION TABLE
# =============================================================================

# Legal transitions: from_state -> set of legal to_states
LEGAL_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.PENDING: frozenset({
        TaskState.IN_PROGRESS,  # Admitted
        TaskState.CANCELLED,
    }),
    TaskState.IN_PROGRESS: frozenset({
        TaskState.COMPLETED,
        TaskState.FAILED,
        TaskState.CANCELLED,
    }),
    TaskState.COMPLETED: frozenset(),
    TaskState.FAILED: frozenset(),
    TaskState.CANCELLED: frozenset(),
}


def is_legal_transition(from_state: TaskState, to_state: TaskState) -> bool:
    return to_state in LEGAL_TRANSITIONS[from_state]


def new_task_id() -> str:
    return f"task_{uuid4().hex[:12]}"


# =============================================================================
# TASK
# =============================================================================

@dataclass(frozen=True)
class TaskTransition:
    """One history entry: the state entered and when."""
    state: TaskState
    timestamp: datetime
    reason: str | None = None


@dataclass
class Task:
    """
    Tracked unit of work.

    Goal-backed tasks record the decision that allowed them; external
    planning tasks have no source goal.
    """
    description: str
    priority: float
    created_at: datetime
    id: str = field(default_factory=new_task_id)
    state: TaskState = TaskState.PENDING
    source_goal_id: str | None = None
    decision_id: str | None = None
    decision_outcome: DecisionOutcome | None = None
    context_snapshot: Any = None
    updated_at: datetime | None = None
    history: list[TaskTransition] = field(default_factory=list)

    # Arrival order; breaks ties between equal priority and timestamp
    arrival: int = 0

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at
        if not self.history:
            self.history.append(TaskTransition(self.state, self.created_at, "created"))

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def is_live(self) -> bool:
        return not self.state.is_terminal

    def transition(self, to_state: TaskState, at: datetime, reason: str | None = None) -> None:
        """
        Move to a new state.

        Raises:
            InvalidTransitionError: the move is not in LEGAL_TRANSITIONS.
                The task is left unchanged.
        """
        if not is_legal_transition(self.state, to_state):
            raise InvalidTransitionError(self.id, self.state.value, to_state.value)

        last = self.history[-1].timestamp
        if at <= last:
            at = last + timedelta(microseconds=1)

        self.state = to_state
        self.updated_at = at
        self.history.append(TaskTransition(to_state, at, reason))

    def copy(self) -> "Task":
        """Snapshot safe to hand to callers."""
        return replace(self, history=list(self.history))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "priority": self.priority,
            "state": self.state.value,
            "source_goal_id": self.source_goal_id,
            "decision_id": self.decision_id,
            "decision_outcome": self.decision_outcome.value if self.decision_outcome else None,
            "context_snapshot": self.context_snapshot,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "history": [
                {"state": t.state.value, "timestamp": t.timestamp.isoformat(), "reason": t.reason}
                for t in self.history
            ],
        }
