"""Case Health result models.

CaseHealth is a computed value object: it is created fresh on every
evaluation call and is never persisted as authoritative state.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from tb_core_lib.models.issue import Issue


class CaseHealthStatus(str, Enum):
    """
    Case Health band, derived from the score.

    Thresholds: STRONG >= 80, ADEQUATE >= 60, WEAK >= 40, AT_RISK < 40
    """

    STRONG = "strong"
    ADEQUATE = "adequate"
    WEAK = "weak"
    AT_RISK = "at-risk"


class FactorStatus(str, Enum):
    """How well a single scoring factor is satisfied"""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def priority(self) -> int:
        """Sort key: most severe first (critical=0, warning=1, good=2)"""
        return _FACTOR_PRIORITY[self]


_FACTOR_PRIORITY = {
    FactorStatus.CRITICAL: 0,
    FactorStatus.WARNING: 1,
    FactorStatus.GOOD: 2,
}


class Factor(BaseModel):
    """One of the five weighted Case Health factors"""

    name: str = Field(description="Factor name, e.g. 'Evidence collected'")
    score: int = Field(ge=0, description="Points earned")
    max_score: int = Field(gt=0, description="Maximum possible points")
    status: FactorStatus
    recommendation: Optional[str] = Field(
        default=None,
        description="Actionable fix; only set when status is not GOOD"
    )

    @model_validator(mode="after")
    def score_within_max(self):
        if self.score > self.max_score:
            raise ValueError(f"factor '{self.name}' scored {self.score} > max {self.max_score}")
        return self

    class Config:
        frozen = True


class CaseHealth(BaseModel):
    """How well documented an issue (or the whole case) is, 0-100"""

    score: int = Field(ge=0, le=100)
    status: CaseHealthStatus
    status_label: str
    status_description: str
    factors: List[Factor] = Field(default_factory=list)

    def factor(self, name: str) -> Optional[Factor]:
        """Look up a factor by name"""
        for f in self.factors:
            if f.name == name:
                return f
        return None

    class Config:
        frozen = True


class Urgency(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NextStepIcon(str, Enum):
    UPLOAD = "upload"
    MESSAGE = "message"
    DOCUMENT = "document"
    CALENDAR = "calendar"
    CHECK = "check"


class NextStep(BaseModel):
    """The single most useful thing the tenant can do next"""

    action: str
    description: str
    href: str = Field(description="Relative app link that performs the action")
    urgency: Urgency
    icon: NextStepIcon

    class Config:
        frozen = True


class WeakestIssue(BaseModel):
    """The active issue that most needs attention, with its recommendation"""

    issue: Issue
    health: CaseHealth
    recommendation: NextStep

    class Config:
        frozen = True
