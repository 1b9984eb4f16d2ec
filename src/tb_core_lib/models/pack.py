"""Pack Readiness result models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PackReadinessStatus(str, Enum):
    """
    Pack Readiness band.

    Thresholds mirror Case Health (80/60/40) with their own labels. Any
    CRITICAL warning caps the band at WEAK.
    """

    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    HIGH_RISK = "high-risk"


class WarningType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class PackWarning(BaseModel):
    """A gap found in a candidate pack selection"""

    type: WarningType
    title: str
    message: str
    issue_id: Optional[str] = None
    issue_title: Optional[str] = None

    class Config:
        frozen = True


class PackCoverage(BaseModel):
    """How many open issues the selection covers"""

    included_issues: int = Field(ge=0)
    excluded_issues: int = Field(ge=0)
    total_open_issues: int = Field(ge=0)

    class Config:
        frozen = True


class PackReadiness(BaseModel):
    """Completeness of a specific evidence pack selection, 0-100"""

    score: int = Field(ge=0, le=100)
    status: PackReadinessStatus
    status_label: str
    status_description: str
    warnings: List[PackWarning] = Field(default_factory=list)
    coverage: PackCoverage
    requires_confirmation: bool

    @property
    def critical_warnings(self) -> List[PackWarning]:
        return [w for w in self.warnings if w.type == WarningType.CRITICAL]

    class Config:
        frozen = True
