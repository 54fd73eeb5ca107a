"""
Matching — Pluggable text matching between inputs and the value model.

The reference strategy is plain token overlap: deterministic and
independent of word order. Any other strategy only has to honour the
same MatchStrategy protocol.
"""

import re
from typing import Protocol, runtime_checkable

from helm.values import CoreValue, RiskFactor


_TOKEN_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> frozenset[str]:
    """Lowercase alphanumeric tokens of a text."""
    return frozenset(_TOKEN_RE.findall(text.lower()))


@runtime_checkable
class MatchStrategy(Protocol):
    """Protocol for input-to-value-model matching."""

    def tokenize(self, text: str) -> frozenset[str]:
        """Extract the token set of an input."""
        ...

    def value_strength(self, value: CoreValue, tokens: frozenset[str]) -> float:
        """How strongly an input involves a value, in [0, 1]. 0 means no match."""
        ...

    def risk_triggered(self, risk: RiskFactor, tokens: frozenset[str]) -> bool:
        """Whether an input triggers a risk factor."""
        ...


class TokenOverlapStrategy:
    """
    Reference matching by token overlap.

    - A value's keyword set is the tokens of its category plus the tokens
      of its keywords; strength is the fraction of that set present.
    - A risk fires when every token of at least one trigger phrase is
      present.
    """

    def tokenize(self, text: str) -> frozenset[str]:
        return tokenize(text)

    def value_strength(self, value: CoreValue, tokens: frozenset[str]) -> float:
        keywords = tokenize(value.category)
        for keyword in value.keywords:
            keywords |= tokenize(keyword)
        if not keywords:
            return 0.0
        return len(keywords & tokens) / len(keywords)

    def risk_triggered(self, risk: RiskFactor, tokens: frozenset[str]) -> bool:
        for phrase in risk.trigger_keywords:
            phrase_tokens = tokenize(phrase)
            if phrase_tokens and phrase_tokens <= tokens:
                return True
        return False
