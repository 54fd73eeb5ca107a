"""
Scoring — Deterministic alignment scoring.

Provides:
- IntegrityScorer: scores changes and goals against a ValueModel
- MatchStrategy / TokenOverlapStrategy: pluggable text matching
- ScoringThresholds / classify: outcome classification
"""

from helm.scoring.matching import (
    MatchStrategy,
    TokenOverlapStrategy,
    tokenize,
)
from helm.scoring.scorer import (
    SEVERITY_MULTIPLIERS,
    severity_multiplier,
    priority_multiplier,
    validate_priority,
    ScoringThresholds,
    classify,
    Violation,
    ScoreResult,
    IntegrityScorer,
)

__all__ = [
    # Matching
    "MatchStrategy",
    "TokenOverlapStrategy",
    "tokenize",
    # Scoring
    "SEVERITY_MULTIPLIERS",
    "severity_multiplier",
    "priority_multiplier",
    "validate_priority",
    "ScoringThresholds",
    "classify",
    "Violation",
    "ScoreResult",
    "IntegrityScorer",
]
