"""
Session — Process-wide, session-scoped ownership of the alignment core.

An agent session owns exactly one ValueModel, one AlignmentGate and one
TaskOrchestrator. They accumulate history, so callers must share them
instead of constructing fresh instances per request. SessionHandle
builds the session lazily on first use and tears it down explicitly.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Callable
from uuid import uuid4

from helm.gate import AlignmentGate, GateConfig
from helm.observability import get_logger, set_session_id
from helm.orchestrator import OrchestratorConfig, TaskOrchestrator
from helm.values import ValueModel


logger = get_logger("session")


@dataclass
class AgentSession:
    """The alignment core of one agent session."""
    value_model: ValueModel
    gate: AlignmentGate
    orchestrator: TaskOrchestrator
    session_id: str = field(default_factory=lambda: f"sess_{uuid4().hex[:12]}")
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def bind_logging(self) -> None:
        """Tag log lines in the current context with this session's id."""
        set_session_id(self.session_id)


def create_session(
    value_model: ValueModel,
    gate_config: GateConfig | None = None,
    orchestrator_config: OrchestratorConfig | None = None,
) -> AgentSession:
    """Factory wiring one gate and one orchestrator to a value model."""
    gate = AlignmentGate(value_model, config=gate_config)
    orchestrator = TaskOrchestrator(gate, config=orchestrator_config)
    session = AgentSession(value_model=value_model, gate=gate, orchestrator=orchestrator)
    logger.info(f"Started session {session.session_id} ({value_model.fingerprint[:12]})")
    return session


class SessionHandle:
    """
    Shared handle to a lazily constructed AgentSession.

    Inject one handle into every caller of a session. The factory runs at
    most once between teardowns, even under concurrent first use.

    Usage:
        handle = SessionHandle(lambda: create_session(load_value_model(path)))
        handle.get().gate.evaluate_behavior_change(...)
        handle.teardown()
    """

    def __init__(self, factory: Callable[[], AgentSession]):
        self._factory = factory
        self._session: AgentSession | None = None
        self._lock = Lock()

    @property
    def initialized(self) -> bool:
        return self._session is not None

    def get(self) -> AgentSession:
        """The session, constructing it on first use."""
        session = self._session
        if session is not None:
            return session
        with self._lock:
            if self._session is None:
                self._session = self._factory()
            return self._session

    def teardown(self) -> AgentSession | None:
        """Drop the current session. The next get() starts a new one."""
        with self._lock:
            session, self._session = self._session, None
        if session is not None:
            logger.info(f"Tore down session {session.session_id}")
        return session
