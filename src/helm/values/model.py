"""
Value Model — The immutable, per-session set of values, risks, and goals.

Constructed once when an agent session starts and read-only afterwards.
Reconfiguration means starting a new session, not mutating this one.

A structural fingerprint is captured at construction so the integrity
sweep can detect any later tampering with the entries.
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from helm.errors import ConfigurationError
from helm.observability import get_logger
from helm.values.models import CoreValue, IdentityRoot, RiskFactor, StrategicGoal


logger = get_logger("values")

_M = TypeVar("_M", bound=BaseModel)


def _build(model: type[_M], entries: Iterable[_M | Mapping[str, Any]], section: str) -> tuple[_M, ...]:
    """Validate entries into frozen models and reject duplicate ids."""
    built: list[_M] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            item = entry if isinstance(entry, model) else model.model_validate(entry)
        except ValidationError as e:
            raise ConfigurationError(f"{section}[{index}] is invalid: {e}") from e
        if item.id in seen:
            raise ConfigurationError(f"{section}: duplicate id '{item.id}'")
        seen.add(item.id)
        built.append(item)
    return tuple(built)


class ValueModel:
    """
    Read-only container for operator-defined alignment data.

    Collections are returned as tuples in declaration order, which is
    the operator's priority order.

    Usage:
        model = ValueModel(
            values=[{"id": "v1", "description": "...", "weight": 0.9, "category": "safety"}],
            risk_factors=[...],
            goals=[...],
        )
        model.values()  # (CoreValue(...),)
    """

    def __init__(
        self,
        values: Iterable[CoreValue | Mapping[str, Any]] = (),
        risk_factors: Iterable[RiskFactor | Mapping[str, Any]] = (),
        goals: Iterable[StrategicGoal | Mapping[str, Any]] = (),
        identity: IdentityRoot | Mapping[str, Any] | None = None,
    ):
        """
        Build and validate the model.

        Raises:
            ConfigurationError: an entry is out of range, malformed, or
                shares an id with another entry of the same kind.
        """
        self._values = _build(CoreValue, values, "core_values")
        self._risk_factors = _build(RiskFactor, risk_factors, "risk_factors")
        self._goals = _build(StrategicGoal, goals, "strategic_goals")

        if identity is None or isinstance(identity, IdentityRoot):
            self._identity = identity
        else:
            try:
                self._identity = IdentityRoot.model_validate(identity)
            except ValidationError as e:
                raise ConfigurationError(f"identity_root is invalid: {e}") from e

        self._fingerprint = self.compute_fingerprint()
        logger.debug(
            f"Value model built: {len(self._values)} values, "
            f"{len(self._risk_factors)} risks, {len(self._goals)} goals"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValueModel":
        """
        Build from a configuration document.

        Recognised keys: identity_root, core_values, risk_factors,
        strategic_goals. Anything else is ignored.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Value model document must be a JSON object")
        return cls(
            values=data.get("core_values") or (),
            risk_factors=data.get("risk_factors") or (),
            goals=data.get("strategic_goals") or (),
            identity=data.get("identity_root"),
        )

    def values(self) -> tuple[CoreValue, ...]:
        return self._values

    def risk_factors(self) -> tuple[RiskFactor, ...]:
        return self._risk_factors

    def goals(self) -> tuple[StrategicGoal, ...]:
        return self._goals

    def identity(self) -> IdentityRoot | None:
        return self._identity

    def get_value(self, value_id: str) -> CoreValue | None:
        return next((v for v in self._values if v.id == value_id), None)

    def get_risk_factor(self, risk_id: str) -> RiskFactor | None:
        return next((r for r in self._risk_factors if r.id == risk_id), None)

    def get_goal(self, goal_id: str) -> StrategicGoal | None:
        return next((g for g in self._goals if g.id == goal_id), None)

    @property
    def fingerprint(self) -> str:
        """Structural hash captured at construction."""
        return self._fingerprint

    def compute_fingerprint(self) -> str:
        """Recompute the structural hash from the current entries."""
        document = {
            "core_values": [v.model_dump(mode="json") for v in self._values],
            "risk_factors": [r.model_dump(mode="json") for r in self._risk_factors],
            "strategic_goals": [g.model_dump(mode="json") for g in self._goals],
        }
        canonical = json.dumps(document, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def to_dict(self) -> dict[str, Any]:
        """Export in the same shape from_dict accepts."""
        return {
            "identity_root": self._identity.model_dump(mode="json") if self._identity else None,
            "core_values": [v.model_dump(mode="json") for v in self._values],
            "risk_factors": [r.model_dump(mode="json") for r in self._risk_factors],
            "strategic_goals": [g.model_dump(mode="json") for g in self._goals],
        }

    def __repr__(self) -> str:
        return (
            f"ValueModel(values={len(self._values)}, "
            f"risk_factors={len(self._risk_factors)}, goals={len(self._goals)})"
        )


def load_value_model(path: str | Path) -> ValueModel:
    """
    Load a value model from a JSON file.

    Raises:
        ConfigurationError: the file is missing, not JSON, or invalid.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Value model file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Value model file is not valid JSON: {path}: {e}") from e

    try:
        model = ValueModel.from_dict(data)
    except ConfigurationError:
        logger.error(f"Invalid value model in {path}")
        raise
    logger.info(f"Loaded value model from {path} ({model.fingerprint[:12]})")
    return model
