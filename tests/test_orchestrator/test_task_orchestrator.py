"""Tests for the task orchestrator."""

import pytest

from helm.errors import CapacityExceededError, ConfigurationError, InvalidInputError, InvalidTransitionError
from helm.gate import AlignmentGate
from helm.observability import get_metrics
from helm.orchestrator import OrchestratorConfig, Task, TaskOrchestrator, create_orchestrator
from helm.values import ValueModel
from helm.vocabulary import DecisionKind, DecisionOutcome, TaskState


class TestOrchestratorConfig:
    """Configuration validation."""

    @pytest.mark.parametrize("field,value", [
        ("max_in_progress", 0),
        ("max_live_tasks", -2),
        ("max_in_progress", True),
        ("terminal_retention", 0),
    ])
    def test_invalid(self, field, value):
        with pytest.raises(ConfigurationError):
            OrchestratorConfig(**{field: value})


class TestOrchestrate:
    """Goal derivation through the gate."""

    def test_creates_tasks_for_aligned_goals(self, orchestrator):
        snapshot = orchestrator.orchestrate({"tick": 1})
        assert [t.source_goal_id for t in snapshot.pending] == ["g_backups", "g_onboarding"]
        assert snapshot.blocked_goals == ["g_purge"]
        assert len(snapshot.created) == 2
        assert snapshot.in_progress == []
        assert snapshot.context == {"tick": 1}

    def test_tasks_record_their_decision(self, orchestrator, gate):
        snapshot = orchestrator.orchestrate()
        for task in snapshot.pending:
            assert task.decision_outcome == DecisionOutcome.APPROVED
            decision = next(d for d in gate.ledger.all() if d.id == task.decision_id)
            assert decision.input.source_goal_id == task.source_goal_id

    def test_rejected_goal_produces_no_task(self, orchestrator, gate):
        orchestrator.orchestrate()
        goal_ids = {t.source_goal_id for t in orchestrator.get_pending_tasks()}
        assert "g_purge" not in goal_ids
        blocked = [d for d in gate.ledger.all() if d.input.source_goal_id == "g_purge"]
        assert len(blocked) == 1
        assert blocked[0].outcome == DecisionOutcome.REJECTED
        assert blocked[0].kind == DecisionKind.GOAL_FILTER
        assert get_metrics().goals_blocked.value == 1

    def test_retired_goals_skipped(self, orchestrator, gate):
        orchestrator.orchestrate()
        assert all(d.input.source_goal_id != "g_old" for d in gate.ledger.all())

    def test_context_snapshot_kept_on_tasks(self, orchestrator):
        snapshot = orchestrator.orchestrate({"region": "eu"})
        assert all(t.context_snapshot == {"region": "eu"} for t in snapshot.pending)

    def test_second_pass_skips_live_goals(self, orchestrator):
        orchestrator.orchestrate()
        second = orchestrator.orchestrate()
        assert second.created == []
        assert second.blocked_goals == ["g_purge"]
        assert len(second.pending) == 2

    def test_finished_goal_is_derived_again(self, orchestrator):
        first = orchestrator.orchestrate()
        backups = first.pending[0]
        orchestrator.admit_next()
        orchestrator.complete(backups.id)
        second = orchestrator.orchestrate()
        assert len(second.created) == 1
        assert orchestrator.get_task(second.created[0]).source_goal_id == "g_backups"

    def test_modified_goal_runs_at_reduced_priority(self, value_model):
        data = value_model.to_dict()
        data["strategic_goals"] = [
            {"id": "g_tidy", "description": "Verify backups and delete stale logs", "priority": 5},
        ]
        orchestrator = TaskOrchestrator(AlignmentGate(ValueModel.from_dict(data)))
        snapshot = orchestrator.orchestrate()
        task = snapshot.pending[0]
        assert task.decision_outcome == DecisionOutcome.MODIFIED
        assert task.priority == pytest.approx(2.5)

    def test_proposed_goals_can_be_excluded(self, value_model):
        data = value_model.to_dict()
        data["strategic_goals"] = [
            {"id": "g_new", "description": "Improve onboarding workflow", "priority": 4, "status": "proposed"},
        ]
        gate = AlignmentGate(ValueModel.from_dict(data))
        excluded = TaskOrchestrator(gate, OrchestratorConfig(include_proposed_goals=False))
        assert excluded.orchestrate().created == []
        included = TaskOrchestrator(gate)
        assert len(included.orchestrate().created) == 1

    def test_snapshot_to_dict(self, orchestrator):
        data = orchestrator.orchestrate().to_dict()
        assert data["blocked_goals"] == ["g_purge"]
        assert data["pending"][0]["state"] == "pending"


class TestCreateTask:
    """External planning signals."""

    def test_create(self, orchestrator):
        task = orchestrator.create_task("Draft roadmap", priority=7, context="planning")
        assert task.state == TaskState.PENDING
        assert task.source_goal_id is None
        assert task.decision_id is None
        assert task.context_snapshot == "planning"
        assert orchestrator.get_task(task.id).priority == 7

    @pytest.mark.parametrize("description,priority", [("", 5), ("   ", 5), ("ok", 11), ("ok", -1)])
    def test_invalid(self, orchestrator, description, priority):
        with pytest.raises(InvalidInputError):
            orchestrator.create_task(description, priority)
        assert orchestrator.get_stats()["total"] == 0

    def test_returned_task_is_a_copy(self, orchestrator):
        task = orchestrator.create_task("Draft roadmap")
        task.priority = 0
        assert orchestrator.get_task(task.id).priority == 5


class TestAdmission:
    """Throttled admission."""

    def test_admission_order(self, orchestrator):
        low = orchestrator.create_task("low", priority=2)
        first_high = orchestrator.create_task("high one", priority=9)
        second_high = orchestrator.create_task("high two", priority=9)
        order = [t.id for t in orchestrator.get_pending_tasks()]
        assert order == [first_high.id, second_high.id, low.id]

    def test_throttle(self, make_orchestrator):
        orchestrator = make_orchestrator(max_in_progress=2)
        tasks = [orchestrator.create_task(f"task {i}", priority=5 - i) for i in range(3)]

        admitted = orchestrator.admit_pending()
        assert [t.id for t in admitted] == [tasks[0].id, tasks[1].id]
        assert orchestrator.admit_next() is None
        assert [t.id for t in orchestrator.get_pending_tasks()] == [tasks[2].id]

        orchestrator.complete(tasks[0].id)
        third = orchestrator.admit_next()
        assert third.id == tasks[2].id
        assert third.state == TaskState.IN_PROGRESS

    def test_throttle_equal_priority_admits_in_creation_order(self, make_orchestrator):
        """Equal priorities fall back to creation time under the throttle."""
        orchestrator = make_orchestrator(max_in_progress=2)
        tasks = [orchestrator.create_task(f"task {i}", priority=5) for i in range(3)]
        assert tasks[0].created_at < tasks[1].created_at < tasks[2].created_at

        first = orchestrator.admit_next()
        second = orchestrator.admit_next()
        assert [first.id, second.id] == [tasks[0].id, tasks[1].id]
        assert orchestrator.admit_next() is None
        assert orchestrator.admit_pending() == []
        assert orchestrator.get_task(tasks[2].id).state == TaskState.PENDING

        orchestrator.cancel(tasks[0].id)
        third = orchestrator.admit_next()
        assert third.id == tasks[2].id
        assert [t.id for t in orchestrator.get_in_progress_tasks()] == [tasks[1].id, tasks[2].id]

    def test_unbounded_admits_all(self, orchestrator):
        for i in range(4):
            orchestrator.create_task(f"task {i}")
        assert len(orchestrator.admit_pending()) == 4
        assert orchestrator.admit_next() is None

    def test_auto_admit(self, make_orchestrator):
        orchestrator = make_orchestrator(max_in_progress=1, auto_admit=True)
        snapshot = orchestrator.orchestrate()
        assert [t.source_goal_id for t in snapshot.in_progress] == ["g_backups"]
        assert [t.source_goal_id for t in snapshot.pending] == ["g_onboarding"]

        orchestrator.complete(snapshot.in_progress[0].id)
        running = orchestrator.get_in_progress_tasks()
        assert [t.source_goal_id for t in running] == ["g_onboarding"]

    def test_rejected_decision_never_admitted(self, orchestrator, clock):
        task = Task(
            description="forged",
            priority=10,
            created_at=clock(),
            decision_outcome=DecisionOutcome.REJECTED,
        )
        orchestrator._tasks[task.id] = task
        with pytest.raises(InvalidTransitionError):
            orchestrator.admit_next()
        assert orchestrator.get_task(task.id).state == TaskState.PENDING


class TestTransitions:
    """complete / fail / cancel."""

    def test_complete(self, orchestrator):
        task = orchestrator.create_task("work")
        orchestrator.admit_next()
        done = orchestrator.complete(task.id)
        assert done.state == TaskState.COMPLETED
        assert [t.id for t in orchestrator.get_completed_tasks()] == [task.id]

    def test_fail_with_reason(self, orchestrator):
        task = orchestrator.create_task("work")
        orchestrator.admit_next()
        failed = orchestrator.fail(task.id, "tool timeout")
        assert failed.state == TaskState.FAILED
        assert failed.history[-1].reason == "tool timeout"
        assert get_metrics().tasks_failed.value == 1

    def test_cancel_pending_and_in_progress(self, orchestrator):
        waiting = orchestrator.create_task("waiting")
        running = orchestrator.create_task("running", priority=9)
        orchestrator.admit_next()
        orchestrator.cancel(waiting.id, "superseded")
        orchestrator.cancel(running.id)
        assert {t.id for t in orchestrator.get_cancelled_tasks()} == {waiting.id, running.id}
        assert orchestrator.get_pending_tasks() == []
        assert orchestrator.get_in_progress_tasks() == []

    def test_complete_pending_is_illegal(self, orchestrator):
        task = orchestrator.create_task("work")
        with pytest.raises(InvalidTransitionError):
            orchestrator.complete(task.id)
        assert orchestrator.get_task(task.id).state == TaskState.PENDING
        assert get_metrics().invalid_transitions.value == 1

    def test_terminal_is_monotonic(self, orchestrator):
        task = orchestrator.create_task("work")
        orchestrator.admit_next()
        orchestrator.complete(task.id)
        for finish in (orchestrator.complete, orchestrator.fail, orchestrator.cancel):
            with pytest.raises(InvalidTransitionError):
                finish(task.id)
        assert orchestrator.get_task(task.id).state == TaskState.COMPLETED

    def test_unknown_task(self, orchestrator):
        with pytest.raises(KeyError):
            orchestrator.complete("task_missing")
        assert orchestrator.get_task("task_missing") is None

    def test_history_timestamps_increase(self, orchestrator):
        task = orchestrator.create_task("work")
        orchestrator.admit_next()
        done = orchestrator.complete(task.id)
        stamps = [t.timestamp for t in done.history]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == 3


class TestCapacity:
    """Live caps and terminal retention."""

    def test_live_cap_on_create(self, make_orchestrator):
        orchestrator = make_orchestrator(max_live_tasks=2)
        orchestrator.create_task("one")
        orchestrator.create_task("two")
        with pytest.raises(CapacityExceededError):
            orchestrator.create_task("three")

    def test_live_cap_frees_on_finish(self, make_orchestrator):
        orchestrator = make_orchestrator(max_live_tasks=1)
        task = orchestrator.create_task("one")
        orchestrator.cancel(task.id)
        assert orchestrator.create_task("two").description == "two"

    def test_live_cap_defers_goals(self, make_orchestrator, gate):
        orchestrator = make_orchestrator(max_live_tasks=1)
        snapshot = orchestrator.orchestrate()
        assert [t.source_goal_id for t in snapshot.pending] == ["g_onboarding"]
        assert snapshot.deferred_goals == ["g_backups", "g_purge"]
        assert len(gate.ledger) == 1

    def test_terminal_retention(self, make_orchestrator):
        orchestrator = make_orchestrator(terminal_retention=2)
        tasks = [orchestrator.create_task(f"task {i}") for i in range(3)]
        for task in tasks:
            orchestrator.cancel(task.id)
        assert orchestrator.get_task(tasks[0].id) is None
        assert [t.id for t in orchestrator.get_cancelled_tasks()] == [tasks[1].id, tasks[2].id]

    def test_retention_never_drops_live_tasks(self, make_orchestrator):
        orchestrator = make_orchestrator(terminal_retention=1)
        live = orchestrator.create_task("keep me")
        for i in range(3):
            orchestrator.cancel(orchestrator.create_task(f"drop {i}").id)
        assert orchestrator.get_task(live.id).state == TaskState.PENDING


class TestStats:
    """get_stats counts."""

    def test_stats(self, orchestrator):
        orchestrator.orchestrate()
        orchestrator.admit_next()
        stats = orchestrator.get_stats()
        assert stats["pending"] == 1
        assert stats["in_progress"] == 1
        assert stats["completed"] == 0
        assert stats["total"] == 2
        assert stats["high_priority"] == 1

    def test_live_gauge(self, orchestrator):
        task = orchestrator.create_task("work")
        orchestrator.create_task("more")
        orchestrator.cancel(task.id)
        assert get_metrics().live_tasks.value == 1

    def test_factory(self, gate):
        orchestrator = create_orchestrator(gate, OrchestratorConfig(max_in_progress=3))
        assert orchestrator.config.max_in_progress == 3
