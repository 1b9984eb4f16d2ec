"""Issue, evidence and communication input models.

These models describe the records the persistence layer hands to the
scoring core. The core treats every one of them as read-only input:
status and severity are owned by the issue tracker and are never changed
here.

Key Models:
- Issue: A logged tenancy issue (status + severity)
- EvidenceRecord / CommsRecord: Raw evidence and communication log rows
- EvidenceSummary / CommsSummary: Per-issue aggregates derived from raw rows
- IssueHealthInput: Pre-aggregated counts used by the Case Health scorer
- IssueForPack: Issue plus attached evidence, used by Pack Readiness
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================
# Status & Severity Primitives
# ============================================================

class IssueStatus(str, Enum):
    """
    Issue lifecycle status.

    Active States: OPEN, IN_PROGRESS (counted by Case Health and packs)
    Inactive States: RESOLVED, CLOSED
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_active(self) -> bool:
        """Check if the issue still counts towards the active case"""
        return self in [IssueStatus.OPEN, IssueStatus.IN_PROGRESS]


class Severity(str, Enum):
    """
    Risk/impact classification of an issue.

    Severity reflects the RISK of an issue, not its current status, and
    never decreases automatically. Ordering: LOW < MEDIUM < HIGH < URGENT.
    """

    URGENT = "Urgent"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """Ordinal used for comparisons (0 = Low, 3 = Urgent)"""
        return _SEVERITY_RANK[self]

    @property
    def is_high(self) -> bool:
        """Urgent and High issues get the protective treatment"""
        return self in [Severity.URGENT, Severity.HIGH]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.URGENT: 3,
}


class CommsDirection(str, Enum):
    """Direction of a logged communication"""
    OUTBOUND = "outbound"  # tenant -> landlord/agent
    INBOUND = "inbound"    # landlord/agent -> tenant


# ============================================================
# Issue
# ============================================================

class Issue(BaseModel):
    """
    A tenancy issue as stored by the issue tracker.
    """

    id: str = Field(description="Issue identifier", min_length=1)

    title: str = Field(description="Short issue title", max_length=500)

    description: Optional[str] = Field(
        default=None,
        description="Free-text description entered by the tenant"
    )

    status: IssueStatus = Field(description="Current lifecycle status")

    severity: Optional[Severity] = Field(
        default=None,
        description="Risk classification; None when never classified"
    )

    created_at: datetime = Field(description="When the issue was logged")

    updated_at: datetime = Field(description="Last modification timestamp")

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def has_high_severity(self) -> bool:
        return self.severity is not None and self.severity.is_high

    class Config:
        frozen = True


class IssueForPack(Issue):
    """
    Issue with its attached evidence rows, as offered for pack selection.
    """

    evidence_items: List["EvidenceRecord"] = Field(
        default_factory=list,
        description="Evidence attached to this issue"
    )

    @property
    def evidence_count(self) -> int:
        return len(self.evidence_items)


# ============================================================
# Raw Records
# ============================================================

class EvidenceRecord(BaseModel):
    """One uploaded evidence item (photo, screenshot, document, ...)"""

    id: str = Field(description="Evidence identifier")
    issue_id: Optional[str] = Field(default=None, description="Issue this evidence is attached to")
    type: str = Field(description="Evidence type: photo | screenshot | pdf | document | other")
    occurred_at: datetime = Field(description="When the evidenced event happened")
    uploaded_at: Optional[datetime] = Field(default=None, description="When the file was uploaded")

    class Config:
        frozen = True


class CommsRecord(BaseModel):
    """One logged communication with the landlord or agent"""

    id: Optional[str] = Field(default=None, description="Communication log identifier")
    issue_id: Optional[str] = Field(default=None, description="Issue this communication relates to")
    occurred_at: datetime = Field(description="When the communication happened")
    direction: Optional[CommsDirection] = Field(
        default=None,
        description="outbound | inbound; legacy rows without a direction count as outbound"
    )

    @property
    def is_inbound(self) -> bool:
        return self.direction == CommsDirection.INBOUND

    class Config:
        frozen = True


# ============================================================
# Derived Aggregates
# ============================================================

class EvidenceSummary(BaseModel):
    """Per-issue evidence aggregate. Recomputed on every call, never stored."""

    total_count: int = Field(default=0, ge=0)
    image_count: int = Field(default=0, ge=0)
    document_count: int = Field(default=0, ge=0)
    last_evidence_at: Optional[datetime] = None
    evidence_ids: List[str] = Field(default_factory=list)
    image_ids: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class CommsSummary(BaseModel):
    """Per-issue communication aggregate, split by direction."""

    total_count: int = Field(default=0, ge=0)
    outbound_count: int = Field(default=0, ge=0)
    inbound_count: int = Field(default=0, ge=0)
    last_outbound_at: Optional[datetime] = None
    last_inbound_at: Optional[datetime] = None
    last_comms_at: Optional[datetime] = None

    @property
    def has_notice(self) -> bool:
        """At least one outbound communication"""
        return self.outbound_count > 0

    @property
    def has_response(self) -> bool:
        """At least one inbound communication"""
        return self.inbound_count > 0

    class Config:
        frozen = True


class IssueHealthInput(BaseModel):
    """
    Everything the Case Health scorer needs for one issue.

    Counts and last-activity timestamps are pre-aggregated by the caller
    (see core.evidence_stats.build_health_inputs).
    """

    issue: Issue
    evidence_count: int = Field(default=0, ge=0)
    comms_count: int = Field(default=0, ge=0)
    last_evidence_at: Optional[datetime] = None
    last_comms_at: Optional[datetime] = None

    @field_validator("evidence_count", "comms_count", mode="before")
    @classmethod
    def reject_bool_counts(cls, v):
        """Counts must be real integers, not flags"""
        if isinstance(v, bool):
            raise ValueError("counts must be integers, not booleans")
        return v

    class Config:
        frozen = True


IssueForPack.model_rebuild()
