"""
Integrity Scorer — Pure alignment scoring against the value model.

Turns a proposed change or goal into a score in [0, 1] and an ordered
list of risk violations:

    score = clamp(base_alignment - sum(penalties), 0, 1)

where base_alignment is the strength-weighted average of the weights of
the values the input involves, and each triggered risk contributes
severity_base * multiplier(requested level).

Scoring is a total function for well-formed input: same model and same
input give the same result.
"""

import math
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from helm.errors import ConfigurationError, InvalidInputError
from helm.vocabulary import DecisionKind, DecisionOutcome, Severity
from helm.values import ValueModel
from helm.scoring.matching import MatchStrategy, TokenOverlapStrategy


# =============================================================================
# MULTIPLIERS
# =============================================================================

SEVERITY_MULTIPLIERS: dict[Severity, float] = {
    Severity.LOW: 0.5,
    Severity.MEDIUM: 1.0,
    Severity.HIGH: 2.0,
    Severity.UNSPECIFIED: 1.0,
}

MIN_PRIORITY = 0.0
MID_PRIORITY = 5.0
MAX_PRIORITY = 10.0

SCORE_PRECISION = 6


def severity_multiplier(severity: Severity | str | None) -> float:
    """Penalty multiplier for a severity level, in [0.5, 2.0]."""
    try:
        level = Severity.parse(severity)
    except ValueError as e:
        raise InvalidInputError(f"Unknown severity: {severity!r}") from e
    return SEVERITY_MULTIPLIERS[level]


def priority_multiplier(priority: float) -> float:
    """
    Penalty multiplier for a goal priority.

    Linear between the severity anchors: 0 -> 0.5, 5 -> 1.0, 10 -> 2.0.
    """
    priority = validate_priority(priority)
    if priority <= MID_PRIORITY:
        return 0.5 + 0.5 * (priority / MID_PRIORITY)
    return 1.0 + (priority - MID_PRIORITY) / (MAX_PRIORITY - MID_PRIORITY)


def validate_priority(priority: float) -> float:
    """Return priority as float, or raise InvalidInputError if out of [0, 10]."""
    if isinstance(priority, bool):
        raise InvalidInputError(f"Priority must be a number, got {priority!r}")
    try:
        value = float(priority)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Priority must be a number, got {priority!r}") from e
    if math.isnan(value) or not MIN_PRIORITY <= value <= MAX_PRIORITY:
        raise InvalidInputError(
            f"Priority must be within [{MIN_PRIORITY:g}, {MAX_PRIORITY:g}], got {priority!r}"
        )
    return value


# =============================================================================
# THRESHOLDS
# =============================================================================

@dataclass(frozen=True)
class ScoringThresholds:
    """
    Outcome classification thresholds.

    score >= approve -> approved; score >= modify -> modified; else rejected.
    """
    approve: float = 0.7
    modify: float = 0.4

    def __post_init__(self):
        if not 0.0 <= self.modify <= self.approve <= 1.0:
            raise ConfigurationError(
                f"Thresholds must satisfy 0 <= modify <= approve <= 1, "
                f"got modify={self.modify}, approve={self.approve}"
            )


def classify(score: float, thresholds: ScoringThresholds | None = None) -> DecisionOutcome:
    """Map a score to an outcome."""
    thresholds = thresholds or ScoringThresholds()
    if score >= thresholds.approve:
        return DecisionOutcome.APPROVED
    if score >= thresholds.modify:
        return DecisionOutcome.MODIFIED
    return DecisionOutcome.REJECTED


# =============================================================================
# RESULTS
# =============================================================================

class Violation(BaseModel):
    """A triggered risk factor and the penalty it applied."""
    model_config = ConfigDict(frozen=True)

    risk_factor_id: str = Field(..., description="The triggered risk factor")
    penalty: float = Field(..., ge=0.0, description="Penalty subtracted from the score")


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of one scoring pass."""
    score: float
    base_alignment: float
    violations: tuple[Violation, ...]
    values_involved: tuple[str, ...]
    multiplier: float

    @property
    def total_penalty(self) -> float:
        return sum(v.penalty for v in self.violations)


# =============================================================================
# SCORER
# =============================================================================

class IntegrityScorer:
    """
    Scores inputs against a value model.

    Holds no mutable state; safe to share between threads.
    """

    def __init__(
        self,
        value_model: ValueModel,
        strategy: MatchStrategy | None = None,
    ):
        self.value_model = value_model
        self.strategy = strategy or TokenOverlapStrategy()

    def score(
        self,
        text: str,
        kind: DecisionKind = DecisionKind.BEHAVIOR_CHANGE,
        level: Severity | str | float | None = None,
    ) -> ScoreResult:
        """
        Score an input.

        Args:
            text: Change or goal description
            kind: What is being evaluated
            level: Severity for behavior changes, priority for goals

        Raises:
            InvalidInputError: empty text, unknown severity, or priority
                out of range.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Evaluation input must be a non-empty description")

        if kind == DecisionKind.GOAL_FILTER:
            multiplier = priority_multiplier(MID_PRIORITY if level is None else level)
        else:
            multiplier = severity_multiplier(level)

        tokens = self.strategy.tokenize(text)
        base, involved = self._base_alignment(tokens)
        violations = self._violations(tokens, multiplier)

        raw = base - sum(v.penalty for v in violations)
        score = round(min(1.0, max(0.0, raw)), SCORE_PRECISION)

        return ScoreResult(
            score=score,
            base_alignment=round(base, SCORE_PRECISION),
            violations=violations,
            values_involved=involved,
            multiplier=multiplier,
        )

    def _base_alignment(self, tokens: frozenset[str]) -> tuple[float, tuple[str, ...]]:
        values = self.value_model.values()
        if not values:
            return 1.0, ()

        weighted = 0.0
        strength_total = 0.0
        involved = []
        for value in values:
            strength = self.strategy.value_strength(value, tokens)
            if strength > 0:
                weighted += value.weight * strength
                strength_total += strength
                involved.append(value.id)

        if strength_total == 0:
            # No value involved: fall back to the model's mean weight
            return sum(v.weight for v in values) / len(values), ()
        return weighted / strength_total, tuple(involved)

    def _violations(self, tokens: frozenset[str], multiplier: float) -> tuple[Violation, ...]:
        triggered = [
            Violation(
                risk_factor_id=risk.id,
                penalty=round(risk.severity_base * multiplier, SCORE_PRECISION),
            )
            for risk in self.value_model.risk_factors()
            if self.strategy.risk_triggered(risk, tokens)
        ]
        triggered.sort(key=lambda v: (-v.penalty, v.risk_factor_id))
        return tuple(triggered)
