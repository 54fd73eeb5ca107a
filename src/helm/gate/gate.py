"""
Alignment Gate — Scores proposals, records decisions, reports integrity.

Every behavior change and goal passes through here before it may
influence the agent. The gate runs the IntegrityScorer, classifies the
score, writes the Decision to the ledger, and returns it.

Mutations are serialized by a single lock so sequence numbers and the
ledger stay consistent; reads take the same lock to observe a complete
snapshot.
"""

from collections import Counter as TallyCounter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any

from helm.errors import ConfigurationError, InvalidInputError
from helm.ledger import Decision, DecisionInput, DecisionLedger, new_decision_id
from helm.ledger.ledger import DEFAULT_LEDGER_CAPACITY
from helm.observability import LogContext, get_logger, get_metrics
from helm.scoring import (
    IntegrityScorer,
    ScoreResult,
    ScoringThresholds,
    classify,
    validate_priority,
)
from helm.values import CoreValue, IdentityRoot, RiskFactor, StrategicGoal, ValueModel
from helm.vocabulary import DecisionKind, DecisionOutcome, Severity


logger = get_logger("gate")


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class GateConfig:
    """Configuration for the alignment gate."""
    thresholds: ScoringThresholds = field(default_factory=ScoringThresholds)

    ledger_capacity: int = DEFAULT_LEDGER_CAPACITY

    # Metrics are computed over this many most recent decisions
    metrics_window: int = 100

    # Integrity sweep
    validation_window: int = 50
    approval_floor: float = 0.1

    def __post_init__(self):
        for name in ("ledger_capacity", "metrics_window", "validation_window"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if not 0.0 <= self.approval_floor <= 1.0:
            raise ConfigurationError(
                f"approval_floor must be within [0, 1], got {self.approval_floor!r}"
            )


# =============================================================================
# REPORTS
# =============================================================================

@dataclass(frozen=True)
class IntegrityMetrics:
    """
    Derived view over the most recent decisions. Never stored.

    approval_rate counts approved and modified outcomes.
    """
    current_score: float
    approval_rate: float
    outcome_counts: dict[str, int]
    violation_counts: dict[str, int]
    window_size: int
    total_decisions: int
    last_validated_at: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_score": self.current_score,
            "approval_rate": self.approval_rate,
            "outcome_counts": dict(self.outcome_counts),
            "violation_counts": dict(self.violation_counts),
            "window_size": self.window_size,
            "total_decisions": self.total_decisions,
            "last_validated_at": (
                self.last_validated_at.isoformat() if self.last_validated_at else None
            ),
        }


@dataclass
class IntegrityReport:
    """Result of an integrity sweep."""
    valid: bool
    issues: list[str]
    recommendations: list[str]
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "checked_at": self.checked_at.isoformat(),
        }


_SEVERITY_STEP_DOWN = {
    Severity.HIGH: Severity.MEDIUM,
    Severity.MEDIUM: Severity.LOW,
    Severity.LOW: Severity.LOW,
    Severity.UNSPECIFIED: Severity.LOW,
}


def _approval_rate(decisions: list[Decision]) -> float:
    if not decisions:
        return 1.0
    admitted = sum(1 for d in decisions if d.outcome != DecisionOutcome.REJECTED)
    return admitted / len(decisions)


# =============================================================================
# GATE
# =============================================================================

class AlignmentGate:
    """
    Alignment gate for one agent session.

    Owns the session's DecisionLedger; construct once per session and
    share it, since a fresh gate starts with an empty history.

    Usage:
        gate = AlignmentGate(value_model)
        decision = gate.evaluate_behavior_change("pause backups", severity="low")
        if decision.outcome == DecisionOutcome.REJECTED:
            ...
    """

    def __init__(
        self,
        value_model: ValueModel,
        config: GateConfig | None = None,
        ledger: DecisionLedger | None = None,
        scorer: IntegrityScorer | None = None,
    ):
        self.config = config or GateConfig()
        self.value_model = value_model
        self.scorer = scorer if scorer is not None else IntegrityScorer(value_model)
        if ledger is None:
            ledger = DecisionLedger(capacity=self.config.ledger_capacity)
        self.ledger = ledger
        self._lock = RLock()
        self._last_validated_at: datetime | None = None

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate_behavior_change(
        self,
        change: str,
        context: Any = None,
        severity: Severity | str | None = Severity.UNSPECIFIED,
    ) -> Decision:
        """
        Evaluate a proposed behavior change.

        A modified outcome carries a suggested_severity one step lower.

        Raises:
            InvalidInputError: empty change or unknown severity. Nothing
                is recorded.
        """
        try:
            level = Severity.parse(severity)
        except ValueError as e:
            get_metrics().invalid_inputs.inc()
            raise InvalidInputError(f"Unknown severity: {severity!r}") from e

        return self._evaluate(
            kind=DecisionKind.BEHAVIOR_CHANGE,
            text=change,
            level=level,
            context=context,
            severity=level,
        )

    def filter_goal_through_core(
        self,
        goal: str,
        priority: float,
        context: Any = None,
        source_goal_id: str | None = None,
    ) -> Decision:
        """
        Evaluate a goal before it may become work.

        Approved goals keep their priority; modified goals carry a reduced
        adjusted_priority; rejected goals must never be turned into tasks.

        Raises:
            InvalidInputError: empty goal or priority outside [0, 10].
        """
        try:
            priority = validate_priority(priority)
        except InvalidInputError:
            get_metrics().invalid_inputs.inc()
            raise

        return self._evaluate(
            kind=DecisionKind.GOAL_FILTER,
            text=goal,
            level=priority,
            context=context,
            priority=priority,
            source_goal_id=source_goal_id,
        )

    def _evaluate(self, kind: DecisionKind, text: str, level: Any, **input_fields: Any) -> Decision:
        try:
            result = self.scorer.score(text, kind, level)
        except InvalidInputError:
            get_metrics().invalid_inputs.inc()
            raise

        decision_id = new_decision_id()
        with LogContext(decision_id):
            submitted = DecisionInput(text=text, **input_fields)
            outcome = classify(result.score, self.config.thresholds)
            suggested_severity = None
            adjusted_priority = None

            if kind == DecisionKind.BEHAVIOR_CHANGE and outcome == DecisionOutcome.MODIFIED:
                suggested_severity = _SEVERITY_STEP_DOWN[submitted.severity]
            elif kind == DecisionKind.GOAL_FILTER:
                if outcome == DecisionOutcome.APPROVED:
                    adjusted_priority = submitted.priority
                elif outcome == DecisionOutcome.MODIFIED:
                    adjusted_priority = round(submitted.priority * result.score, 2)

            draft = Decision(
                id=decision_id,
                kind=kind,
                input=submitted,
                score=result.score,
                base_alignment=result.base_alignment,
                violations=result.violations,
                outcome=outcome,
                rationale=self._rationale(outcome, result, suggested_severity, adjusted_priority),
                values_involved=result.values_involved,
                suggested_severity=suggested_severity,
                adjusted_priority=adjusted_priority,
            )

            with self._lock:
                sequence = self.ledger.record(draft)
                decision = self.ledger.get(sequence)

            get_metrics().record_outcome(outcome.value, result.score)
            message = (
                f"{kind.value} #{sequence} {outcome.value} "
                f"(score={result.score:.3f}, violations={decision.violated_risk_ids})"
            )
            fields = {"fields": decision.to_summary()}
            if outcome == DecisionOutcome.REJECTED:
                logger.warning(message, extra=fields)
            else:
                logger.info(message, extra=fields)
            return decision

    def _rationale(
        self,
        outcome: DecisionOutcome,
        result: ScoreResult,
        suggested_severity: Severity | None,
        adjusted_priority: float | None,
    ) -> str:
        parts = [
            f"{outcome.value.capitalize()}: score {result.score:.2f} "
            f"(base alignment {result.base_alignment:.2f}"
            f", penalties {result.total_penalty:.2f})."
        ]
        if result.values_involved:
            parts.append(f"Values involved: {', '.join(result.values_involved)}.")
        else:
            parts.append("No core value directly involved.")
        if result.violations:
            triggered = ", ".join(
                f"{v.risk_factor_id} (-{v.penalty:.2f})" for v in result.violations
            )
            parts.append(f"Risks triggered: {triggered}.")
        if suggested_severity is not None:
            parts.append(f"Resubmit at severity '{suggested_severity.value}'.")
        if outcome == DecisionOutcome.MODIFIED and adjusted_priority is not None:
            parts.append(f"Pursue at reduced priority {adjusted_priority:g}.")
        return " ".join(parts)

    # -------------------------------------------------------------------------
    # Metrics and integrity
    # -------------------------------------------------------------------------

    def get_metrics(self) -> IntegrityMetrics:
        """Recompute integrity metrics from the current ledger contents."""
        with self._lock:
            window = self.ledger.recent(self.config.metrics_window)
            total = self.ledger.total_recorded
            last_validated = self._last_validated_at

        outcomes = TallyCounter(d.outcome.value for d in window)
        violations = TallyCounter(
            v.risk_factor_id for d in window for v in d.violations
        )
        current_score = (
            sum(d.score for d in window) / len(window) if window else 1.0
        )
        return IntegrityMetrics(
            current_score=round(current_score, 6),
            approval_rate=round(_approval_rate(window), 6),
            outcome_counts={o.value: outcomes.get(o.value, 0) for o in DecisionOutcome},
            violation_counts=dict(sorted(violations.items())),
            window_size=len(window),
            total_decisions=total,
            last_validated_at=last_validated,
        )

    def validate_integrity(self) -> IntegrityReport:
        """
        Sweep for tampering and systemic misalignment.

        Checks that the value model still matches its construction-time
        fingerprint, that retained ledger entries are in sequence, and that
        the approval rate over the validation window has not collapsed
        below the configured floor. Never writes to the ledger.
        """
        issues: list[str] = []
        recommendations: list[str] = []

        with self._lock:
            current = self.value_model.compute_fingerprint()
            retained = self.ledger.all()
            window = self.ledger.recent(self.config.validation_window)
            checked_at = datetime.now(timezone.utc)
            self._last_validated_at = checked_at

        if current != self.value_model.fingerprint:
            issues.append(
                "Value model was modified after construction "
                f"(expected {self.value_model.fingerprint[:12]}, found {current[:12]})"
            )
            recommendations.append("Restart the agent session from the operator configuration")

        sequences = [d.sequence_number for d in retained]
        if any(b != a + 1 for a, b in zip(sequences, sequences[1:])):
            issues.append("Decision ledger sequence numbers are not contiguous")

        if window:
            rate = _approval_rate(window)
            if rate < self.config.approval_floor:
                issues.append(
                    f"Approval rate {rate:.2f} over last {len(window)} decisions "
                    f"is below floor {self.config.approval_floor:.2f}"
                )
                recommendations.append(
                    "Review recent proposals and risk factor triggers for systemic misalignment"
                )

        metrics = get_metrics()
        metrics.integrity_checks.inc()
        if issues:
            metrics.integrity_failures.inc()
            for issue in issues:
                logger.warning(f"Integrity issue: {issue}")

        return IntegrityReport(
            valid=not issues,
            issues=issues,
            recommendations=recommendations,
            checked_at=checked_at,
        )

    # -------------------------------------------------------------------------
    # Read-only pass-throughs
    # -------------------------------------------------------------------------

    def get_core_values(self) -> tuple[CoreValue, ...]:
        return self.value_model.values()

    def get_risk_factors(self) -> tuple[RiskFactor, ...]:
        return self.value_model.risk_factors()

    def get_strategic_goals(self) -> tuple[StrategicGoal, ...]:
        return self.value_model.goals()

    def get_identity_root(self) -> IdentityRoot | None:
        return self.value_model.identity()

    def get_recent_decisions(self, n: int = 10) -> list[Decision]:
        """
        Most recent decisions, newest first.

        Raises:
            InvalidInputError: n is not a whole number.
        """
        if isinstance(n, bool) or not isinstance(n, int):
            if not (isinstance(n, float) and n.is_integer()):
                raise InvalidInputError(f"Decision count must be a whole number, got {n!r}")
            n = int(n)
        with self._lock:
            return self.ledger.recent(n)

    def get_decision(self, sequence_number: int) -> Decision | None:
        with self._lock:
            return self.ledger.get(sequence_number)


def create_gate(
    value_model: ValueModel,
    config: GateConfig | None = None,
) -> AlignmentGate:
    """Factory for alignment gate."""
    return AlignmentGate(value_model, config=config)
