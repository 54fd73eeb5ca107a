"""
HELM — Alignment-gated task orchestration core.

Every proposed behavior change or goal is scored against an operator's
value model before it may influence the agent; every evaluation is kept
in a bounded ledger; goal-derived work only enters progress when its
decision allows it.
"""

__version__ = "0.1.0"

from helm.errors import (
    HelmError,
    ConfigurationError,
    InvalidInputError,
    InvalidTransitionError,
    CapacityExceededError,
)
from helm.vocabulary import DecisionKind, DecisionOutcome, Severity, GoalStatus, TaskState
from helm.values import CoreValue, RiskFactor, StrategicGoal, ValueModel, load_value_model
from helm.ledger import Decision, DecisionLedger
from helm.gate import AlignmentGate, GateConfig, IntegrityMetrics, IntegrityReport
from helm.orchestrator import OrchestratorConfig, Task, TaskOrchestrator
from helm.session import AgentSession, SessionHandle, create_session

__all__ = [
    "__version__",
    # Errors
    "HelmError",
    "ConfigurationError",
    "InvalidInputError",
    "InvalidTransitionError",
    "CapacityExceededError",
    # Vocabulary
    "DecisionKind",
    "DecisionOutcome",
    "Severity",
    "GoalStatus",
    "TaskState",
    # Components
    "CoreValue",
    "RiskFactor",
    "StrategicGoal",
    "ValueModel",
    "load_value_model",
    "Decision",
    "DecisionLedger",
    "AlignmentGate",
    "GateConfig",
    "IntegrityMetrics",
    "IntegrityReport",
    "OrchestratorConfig",
    "Task",
    "TaskOrchestrator",
    # Session
    "AgentSession",
    "SessionHandle",
    "create_session",
]
