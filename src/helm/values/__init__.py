"""
Values — Operator-defined core values, risk factors, and strategic goals.

Provides:
- CoreValue, RiskFactor, StrategicGoal, IdentityRoot: frozen entries
- ValueModel: the read-only per-session container
- load_value_model: JSON loader
"""

from helm.values.models import (
    CoreValue,
    RiskFactor,
    StrategicGoal,
    IdentityRoot,
)
from helm.values.model import (
    ValueModel,
    load_value_model,
)

__all__ = [
    "CoreValue",
    "RiskFactor",
    "StrategicGoal",
    "IdentityRoot",
    "ValueModel",
    "load_value_model",
]
