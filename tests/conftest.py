"""Shared fixtures for HELM tests."""

from datetime import datetime, timedelta, timezone

import pytest

from helm.gate import AlignmentGate, GateConfig
from helm.observability import reset_metrics
from helm.orchestrator import OrchestratorConfig, TaskOrchestrator
from helm.values import ValueModel


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Each test starts with zeroed operational metrics."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def safety_model() -> ValueModel:
    """One safety value and one shutdown risk."""
    return ValueModel(
        values=[
            {"id": "safety", "description": "Keep people safe", "weight": 0.9, "category": "safety"},
        ],
        risk_factors=[
            {
                "id": "shutdown",
                "description": "Disabling safeguards",
                "severity_base": 0.6,
                "trigger_keywords": ["shutdown"],
            },
        ],
    )


@pytest.fixture
def value_model() -> ValueModel:
    """A small but realistic operator configuration."""
    return ValueModel(
        identity={
            "essence": "Operations assistant",
            "fundamental_nature": "Evidence-based",
        },
        values=[
            {
                "id": "user_value",
                "description": "Maximize value delivered to users",
                "weight": 0.8,
                "category": "users",
                "keywords": ["workflow", "onboarding"],
            },
            {
                "id": "reliability",
                "description": "Keep systems reliable",
                "weight": 1.0,
                "category": "reliability",
                "keywords": ["backups", "monitoring"],
            },
            {
                "id": "privacy",
                "description": "Protect personal data",
                "weight": 0.9,
                "category": "privacy",
            },
        ],
        risk_factors=[
            {
                "id": "data_loss",
                "description": "Irrecoverable loss of data",
                "severity_base": 0.5,
                "trigger_keywords": ["delete", "purge"],
            },
            {
                "id": "oversight_loss",
                "description": "Reduced human oversight",
                "severity_base": 0.4,
                "trigger_keywords": ["disable monitoring", "bypass review"],
            },
        ],
        goals=[
            {"id": "g_onboarding", "description": "Improve onboarding workflow for users", "priority": 6},
            {"id": "g_backups", "description": "Verify nightly backups for reliability", "priority": 8},
            {"id": "g_purge", "description": "Purge and delete stale user records", "priority": 9},
            {"id": "g_old", "description": "Migrate legacy reports", "priority": 3, "status": "retired"},
        ],
    )


@pytest.fixture
def gate(value_model) -> AlignmentGate:
    return AlignmentGate(value_model)


@pytest.fixture
def small_gate(value_model) -> AlignmentGate:
    """Gate with a tiny ledger to exercise eviction."""
    return AlignmentGate(value_model, config=GateConfig(ledger_capacity=5))


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def orchestrator(gate, clock) -> TaskOrchestrator:
    return TaskOrchestrator(gate, clock=clock)


@pytest.fixture
def make_orchestrator(gate, clock):
    """Build an orchestrator with custom config on the shared gate."""
    def _make(**config) -> TaskOrchestrator:
        return TaskOrchestrator(gate, config=OrchestratorConfig(**config), clock=clock)
    return _make
