"""
Task Orchestrator — Goal-gated task lifecycle control.

Turns strategic goals into tasks, but only through the AlignmentGate:
a goal becomes a pending task only when its decision is approved or
modified. Rejected goals produce no task; their decision stays visible
in the ledger as a blocked-goal record.

Admission from pending to in-progress can be throttled. Waiting tasks
are admitted by priority, then creation time, then arrival order.

orchestrate() is poll-driven: call it repeatedly; each pass is bounded
by the number of strategic goals.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable

from helm.errors import (
    CapacityExceededError,
    ConfigurationError,
    InvalidInputError,
    InvalidTransitionError,
)
from helm.gate import AlignmentGate
from helm.ledger import BoundedLog
from helm.observability import get_logger, get_metrics
from helm.orchestrator.task import Task
from helm.scoring import validate_priority
from helm.vocabulary import DecisionOutcome, GoalStatus, TaskState


logger = get_logger("orchestrator")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class OrchestratorConfig:
    """
    Configuration for the task orchestrator.

    None for a limit means unbounded.
    """
    # Admission throttle
    max_in_progress: int | None = None

    # Hard cap on pending + in-progress tasks
    max_live_tasks: int | None = None

    # Terminal tasks kept for inspection; oldest dropped first
    terminal_retention: int = 500

    # Fill free slots automatically after orchestrate() and on release
    auto_admit: bool = False

    # Whether proposed (not yet active) goals are considered
    include_proposed_goals: bool = True

    def __post_init__(self):
        for name in ("max_in_progress", "max_live_tasks"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                raise ConfigurationError(f"{name} must be a positive integer or None, got {value!r}")
        if isinstance(self.terminal_retention, bool) or not isinstance(self.terminal_retention, int) \
                or self.terminal_retention <= 0:
            raise ConfigurationError(
                f"terminal_retention must be a positive integer, got {self.terminal_retention!r}"
            )


@dataclass
class OrchestrationSnapshot:
    """Task sets after one orchestration pass."""
    context: Any
    pending: list[Task]
    in_progress: list[Task]
    completed: list[Task]
    failed: list[Task] = field(default_factory=list)
    cancelled: list[Task] = field(default_factory=list)

    # Ids of tasks created this pass
    created: list[str] = field(default_factory=list)

    # Goal ids whose decision was rejected this pass
    blocked_goals: list[str] = field(default_factory=list)

    # Goal ids not evaluated because max_live_tasks was reached
    deferred_goals: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "context": self.context,
            "pending": [t.to_dict() for t in self.pending],
            "in_progress": [t.to_dict() for t in self.in_progress],
            "completed": [t.to_dict() for t in self.completed],
            "failed": [t.to_dict() for t in self.failed],
            "cancelled": [t.to_dict() for t in self.cancelled],
            "created": list(self.created),
            "blocked_goals": list(self.blocked_goals),
            "deferred_goals": list(self.deferred_goals),
        }


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class TaskOrchestrator:
    """
    Owns the task set for one agent session.

    Usage:
        orchestrator = TaskOrchestrator(gate, OrchestratorConfig(max_in_progress=2))
        snapshot = orchestrator.orchestrate(context)
        orchestrator.admit_pending()
        orchestrator.complete(task_id)
    """

    def __init__(
        self,
        gate: AlignmentGate,
        config: OrchestratorConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.gate = gate
        self.config = config or OrchestratorConfig()
        self._clock = clock or _utcnow
        self._lock = RLock()
        self._tasks: dict[str, Task] = {}
        self._terminal: BoundedLog[str] = BoundedLog(
            self.config.terminal_retention,
            on_evict=self._drop_terminal,
        )
        self._arrivals = 0

    # -------------------------------------------------------------------------
    # Task creation
    # -------------------------------------------------------------------------

    def orchestrate(self, current_context: Any = None) -> OrchestrationSnapshot:
        """
        Run one orchestration pass.

        Every eligible goal without a live task is filtered through the
        gate. Approved and modified goals become pending tasks at the
        decision's adjusted priority; rejected goals are reported as
        blocked.
        """
        created: list[str] = []
        blocked: list[str] = []
        deferred: list[str] = []

        with self._lock:
            represented = {
                t.source_goal_id for t in self._tasks.values()
                if t.is_live and t.source_goal_id is not None
            }
            for goal in self._eligible_goals():
                if goal.id in represented:
                    continue
                if self._at_live_cap():
                    deferred.append(goal.id)
                    continue

                decision = self.gate.filter_goal_through_core(
                    goal.description,
                    goal.priority,
                    context=current_context,
                    source_goal_id=goal.id,
                )
                if decision.outcome == DecisionOutcome.REJECTED:
                    blocked.append(goal.id)
                    get_metrics().goals_blocked.inc()
                    logger.warning(
                        f"Goal {goal.id} blocked by decision #{decision.sequence_number} "
                        f"(score={decision.score:.3f})"
                    )
                    continue

                task = self._add_task(
                    description=goal.description,
                    priority=decision.adjusted_priority,
                    source_goal_id=goal.id,
                    decision_id=decision.id,
                    decision_outcome=decision.outcome,
                    context=current_context,
                )
                created.append(task.id)

            if deferred:
                logger.warning(
                    f"Live task cap {self.config.max_live_tasks} reached; "
                    f"deferred goals: {deferred}"
                )

            if self.config.auto_admit:
                self._fill_slots()

            return OrchestrationSnapshot(
                context=current_context,
                pending=self.get_pending_tasks(),
                in_progress=self.get_in_progress_tasks(),
                completed=self.get_completed_tasks(),
                failed=self.get_failed_tasks(),
                cancelled=self.get_cancelled_tasks(),
                created=created,
                blocked_goals=blocked,
                deferred_goals=deferred,
            )

    def create_task(
        self,
        description: str,
        priority: float = 5.0,
        context: Any = None,
    ) -> Task:
        """
        Create a pending task from an external planning signal.

        Raises:
            InvalidInputError: empty description or priority outside [0, 10].
            CapacityExceededError: max_live_tasks is reached.
        """
        if not isinstance(description, str) or not description.strip():
            raise InvalidInputError("Task description must be non-empty")
        priority = validate_priority(priority)

        with self._lock:
            if self._at_live_cap():
                raise CapacityExceededError(
                    f"Live task cap {self.config.max_live_tasks} reached"
                )
            task = self._add_task(description=description, priority=priority, context=context)
            if self.config.auto_admit:
                self._fill_slots()
            return task.copy()

    # -------------------------------------------------------------------------
    # Admission
    # -------------------------------------------------------------------------

    def admit_next(self) -> Task | None:
        """Admit the next waiting task if a slot is free."""
        with self._lock:
            if not self._has_free_slot():
                return None
            waiting = self._admission_order()
            if not waiting:
                return None
            return self._admit(waiting[0]).copy()

    def admit_pending(self) -> list[Task]:
        """Admit waiting tasks until the throttle is reached."""
        with self._lock:
            return [t.copy() for t in self._fill_slots()]

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def complete(self, task_id: str) -> Task:
        """Mark an in-progress task completed."""
        return self._finish(task_id, TaskState.COMPLETED, None)

    def fail(self, task_id: str, reason: str | None = None) -> Task:
        """Mark an in-progress task failed."""
        return self._finish(task_id, TaskState.FAILED, reason)

    def cancel(self, task_id: str, reason: str | None = None) -> Task:
        """Cancel a pending or in-progress task. Takes effect immediately."""
        return self._finish(task_id, TaskState.CANCELLED, reason)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_task(self, task_id: str) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.copy() if task else None

    def get_pending_tasks(self) -> list[Task]:
        """Pending tasks in admission order."""
        with self._lock:
            return [t.copy() for t in self._admission_order()]

    def get_in_progress_tasks(self) -> list[Task]:
        return self._in_state(TaskState.IN_PROGRESS)

    def get_completed_tasks(self) -> list[Task]:
        return self._in_state(TaskState.COMPLETED)

    def get_failed_tasks(self) -> list[Task]:
        return self._in_state(TaskState.FAILED)

    def get_cancelled_tasks(self) -> list[Task]:
        return self._in_state(TaskState.CANCELLED)

    def get_stats(self) -> dict[str, int]:
        """Task counts per state."""
        with self._lock:
            stats = {state.value: 0 for state in TaskState}
            for task in self._tasks.values():
                stats[task.state.value] += 1
            stats["total"] = len(self._tasks)
            stats["high_priority"] = sum(1 for t in self._tasks.values() if t.priority >= 7.5)
            return stats

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _eligible_goals(self):
        for goal in self.gate.get_strategic_goals():
            if goal.status == GoalStatus.RETIRED:
                continue
            if goal.status == GoalStatus.PROPOSED and not self.config.include_proposed_goals:
                continue
            yield goal

    def _add_task(
        self,
        description: str,
        priority: float,
        source_goal_id: str | None = None,
        decision_id: str | None = None,
        decision_outcome: DecisionOutcome | None = None,
        context: Any = None,
    ) -> Task:
        self._arrivals += 1
        task = Task(
            description=description,
            priority=priority,
            created_at=self._clock(),
            source_goal_id=source_goal_id,
            decision_id=decision_id,
            decision_outcome=decision_outcome,
            context_snapshot=context,
            arrival=self._arrivals,
        )
        self._tasks[task.id] = task
        metrics = get_metrics()
        metrics.tasks_created.inc()
        metrics.live_tasks.inc()
        logger.info(
            f"Created task {task.id} (priority={priority:g}"
            + (f", goal={source_goal_id}" if source_goal_id else "")
            + ")"
        )
        return task

    def _live_count(self) -> int:
        return sum(1 for t in self._tasks.values() if t.is_live)

    def _at_live_cap(self) -> bool:
        cap = self.config.max_live_tasks
        return cap is not None and self._live_count() >= cap

    def _has_free_slot(self) -> bool:
        cap = self.config.max_in_progress
        if cap is None:
            return True
        running = sum(1 for t in self._tasks.values() if t.state == TaskState.IN_PROGRESS)
        return running < cap

    def _admission_order(self) -> list[Task]:
        waiting = [t for t in self._tasks.values() if t.state == TaskState.PENDING]
        waiting.sort(key=lambda t: (-t.priority, t.created_at, t.arrival))
        return waiting

    def _in_state(self, state: TaskState) -> list[Task]:
        with self._lock:
            tasks = [t for t in self._tasks.values() if t.state == state]
            tasks.sort(key=lambda t: (t.updated_at, t.arrival))
            return [t.copy() for t in tasks]

    def _admit(self, task: Task) -> Task:
        if task.decision_outcome == DecisionOutcome.REJECTED:
            get_metrics().invalid_transitions.inc()
            raise InvalidTransitionError(task.id, task.state.value, TaskState.IN_PROGRESS.value)
        task.transition(TaskState.IN_PROGRESS, self._clock(), "admitted")
        get_metrics().tasks_admitted.inc()
        logger.info(f"Admitted task {task.id}")
        return task

    def _fill_slots(self) -> list[Task]:
        admitted = []
        for task in self._admission_order():
            if not self._has_free_slot():
                break
            admitted.append(self._admit(task))
        return admitted

    def _finish(self, task_id: str, state: TaskState, reason: str | None) -> Task:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise KeyError(f"Unknown task: {task_id}")
            try:
                task.transition(state, self._clock(), reason)
            except InvalidTransitionError:
                get_metrics().invalid_transitions.inc()
                logger.warning(f"Refused {task.state.value} -> {state.value} for task {task_id}")
                raise

            metrics = get_metrics()
            metrics.live_tasks.dec()
            {
                TaskState.COMPLETED: metrics.tasks_completed,
                TaskState.FAILED: metrics.tasks_failed,
                TaskState.CANCELLED: metrics.tasks_cancelled,
            }[state].inc()
            logger.info(
                f"Task {task_id} {state.value}" + (f": {reason}" if reason else "")
            )

            snapshot = task.copy()
            self._terminal.append(task_id)
            if self.config.auto_admit:
                self._fill_slots()
            return snapshot

    def _drop_terminal(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)
        logger.debug(f"Dropped retained task {task_id}")


def create_orchestrator(
    gate: AlignmentGate,
    config: OrchestratorConfig | None = None,
) -> TaskOrchestrator:
    """Factory for task orchestrator."""
    return TaskOrchestrator(gate, config=config)
