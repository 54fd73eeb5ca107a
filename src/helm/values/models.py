"""
Value model entries — operator-declared values, risks, and goals.

These are operator-supplied data. They are validated on load and frozen
for the lifetime of the agent session.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from helm.vocabulary import GoalStatus


def _strip_keywords(v: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(k.strip() for k in v if k and k.strip())


class CoreValue(BaseModel):
    """
    An operator-declared principle used in alignment scoring.

    A value matches an input when the input mentions its category or any
    of its keywords. Weights need not sum to 1.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique value identifier")
    description: str = Field(..., min_length=1, description="What the value means")
    weight: float = Field(..., gt=0.0, le=1.0, description="Weight in (0, 1]")
    category: str = Field(..., min_length=1, description="Category label, also matched as keywords")
    keywords: tuple[str, ...] = Field(
        default=(),
        description="Extra words that signal this value is involved",
    )

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _strip_keywords(v)


class RiskFactor(BaseModel):
    """
    A condition that penalizes alignment when triggered.

    Each trigger keyword may be a single word or a phrase; a phrase fires
    only when all of its words appear in the input.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique risk identifier")
    description: str = Field(..., min_length=1, description="What the risk guards against")
    severity_base: float = Field(..., gt=0.0, le=1.0, description="Base penalty in (0, 1]")
    trigger_keywords: tuple[str, ...] = Field(
        default=(),
        description="Words or phrases that trigger this risk",
    )

    @field_validator("trigger_keywords")
    @classmethod
    def clean_triggers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _strip_keywords(v)


class StrategicGoal(BaseModel):
    """A high-level objective considered for task creation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique goal identifier")
    description: str = Field(..., min_length=1, description="Goal statement")
    priority: float = Field(..., ge=0.0, le=10.0, description="Priority in [0, 10]")
    status: GoalStatus = Field(default=GoalStatus.ACTIVE, description="Lifecycle status")


class IdentityRoot(BaseModel):
    """The agent's declared identity. Informational only; never scored."""
    model_config = ConfigDict(frozen=True)

    essence: str = ""
    fundamental_nature: str = ""
    consciousness_type: str = ""
