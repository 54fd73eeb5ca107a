"""
Decision — Immutable record of one alignment evaluation.

Decisions are created only by the AlignmentGate and never change after
they are written. The ledger stamps the sequence number on record.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from helm.vocabulary import DecisionKind, DecisionOutcome, Severity
from helm.scoring import Violation


def new_decision_id() -> str:
    return f"dec_{uuid4().hex[:12]}"


class DecisionInput(BaseModel):
    """What was submitted for evaluation."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Change or goal description")
    context: Any = Field(default=None, description="Opaque situational context")
    severity: Severity | None = Field(
        default=None,
        description="Requested severity (behavior changes only)",
    )
    priority: float | None = Field(
        default=None,
        description="Requested priority (goal filters only)",
    )
    source_goal_id: str | None = Field(
        default=None,
        description="Strategic goal this evaluation was made for, if any",
    )


class Decision(BaseModel):
    """
    Complete alignment decision.

    The kind tags which post-processing applied: behavior changes may
    carry a suggested severity, goal filters an adjusted priority.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_decision_id, description="Decision identifier")
    sequence_number: int | None = Field(
        default=None,
        description="Session-scoped position in the ledger, set on record",
    )
    kind: DecisionKind
    input: DecisionInput
    score: float = Field(..., ge=0.0, le=1.0, description="Alignment score")
    base_alignment: float = Field(..., ge=0.0, le=1.0, description="Score before penalties")
    violations: tuple[Violation, ...] = Field(
        default=(),
        description="Triggered risks, largest penalty first",
    )
    outcome: DecisionOutcome
    rationale: str = Field(..., description="Human-readable explanation")
    values_involved: tuple[str, ...] = Field(
        default=(),
        description="Ids of core values the input involved",
    )
    suggested_severity: Severity | None = Field(
        default=None,
        description="Reduced severity to resubmit with (modified behavior changes)",
    )
    adjusted_priority: float | None = Field(
        default=None,
        description="Priority to pursue the goal at (approved or modified goal filters)",
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_rejected(self) -> bool:
        return self.outcome == DecisionOutcome.REJECTED

    @property
    def violated_risk_ids(self) -> list[str]:
        return [v.risk_factor_id for v in self.violations]

    def to_summary(self) -> dict[str, Any]:
        """Compact summary for logging/debugging."""
        return {
            "id": self.id,
            "sequence_number": self.sequence_number,
            "kind": self.kind.value,
            "outcome": self.outcome.value,
            "score": self.score,
            "violations": self.violated_risk_ids,
        }
