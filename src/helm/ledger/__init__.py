"""
Ledger — Auditable decision history.

Provides:
- Decision / DecisionInput: immutable evaluation records
- DecisionLedger: bounded, sequence-numbered history
- BoundedLog: the shared capacity-bounded FIFO
"""

from helm.ledger.bounded import BoundedLog
from helm.ledger.decision import (
    DecisionInput,
    Decision,
    new_decision_id,
)
from helm.ledger.ledger import (
    DEFAULT_LEDGER_CAPACITY,
    DecisionLedger,
)

__all__ = [
    "BoundedLog",
    "DecisionInput",
    "Decision",
    "new_decision_id",
    "DEFAULT_LEDGER_CAPACITY",
    "DecisionLedger",
]
