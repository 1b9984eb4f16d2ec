"""Enforcement decision and override audit models.

Key Models:
- EnforcementLevel: allowed | warned | soft-blocked | hard-blocked
- EnforcementAction: the six gated actions
- PlanId / PlanMode: billing tier and the enforcement mode it implies
- EnforcementResult: decision returned by core.enforcement.check_enforcement
- OverrideLogEntry: append-only audit record of a user proceeding past a
  warned or soft-blocked decision
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from tb_core_lib.models.health import CaseHealthStatus


# ============================================================
# Enumerations
# ============================================================

class EnforcementLevel(str, Enum):
    """
    How strongly an action is gated.

    Ordered from least to most restrictive:
      ALLOWED → WARNED → SOFT_BLOCKED → HARD_BLOCKED
    """

    ALLOWED = "allowed"
    """Action proceeds normally."""

    WARNED = "warned"
    """Action proceeds with an inline warning."""

    SOFT_BLOCKED = "soft-blocked"
    """Action requires explicit confirmation with risk acknowledgment."""

    HARD_BLOCKED = "hard-blocked"
    """Action is prevented entirely."""

    @property
    def is_overridable(self) -> bool:
        """Levels a user can proceed past (and which get logged when they do)"""
        return self in [EnforcementLevel.WARNED, EnforcementLevel.SOFT_BLOCKED]


class EnforcementAction(str, Enum):
    """Consequential actions gated by Case Health"""

    GENERATE_PACK = "generate_pack"
    CLOSE_ISSUE = "close_issue"
    RESOLVE_ISSUE = "resolve_issue"
    DELETE_EVIDENCE = "delete_evidence"
    DELETE_COMMS = "delete_comms"
    ARCHIVE_ISSUE = "archive_issue"


class PlanId(str, Enum):
    """Billing tier"""

    FREE = "free"
    PLUS = "plus"
    PRO = "pro"


class PlanMode(str, Enum):
    """
    Enforcement mode implied by the plan.

    GUIDED (Free/Plus): full matrix strictness, educational copy
    ADVISOR (Pro): matrix softened by one level, neutral copy
    """

    GUIDED = "guided"
    ADVISOR = "advisor"


def plan_mode_for(plan_id: PlanId) -> PlanMode:
    """Pro users get Advisor mode; everyone else is Guided"""
    return PlanMode.ADVISOR if PlanId(plan_id) == PlanId.PRO else PlanMode.GUIDED


# ============================================================
# Decision
# ============================================================

class EnforcementMessage(BaseModel):
    """User-facing copy for an enforcement decision"""

    title: str
    description: str
    confirm_label: Optional[str] = None
    cancel_label: Optional[str] = None
    warning_text: Optional[str] = None

    class Config:
        frozen = True


class EnforcementContext(BaseModel):
    """Inputs that produced a decision, echoed back for logging and UI"""

    action: EnforcementAction
    health_status: CaseHealthStatus
    health_score: float = Field(ge=0, le=100)
    plan_mode: PlanMode
    plan_id: PlanId

    class Config:
        frozen = True


class EnforcementResult(BaseModel):
    """
    Outcome of checking an action against Case Health and plan.

    Invariants:
    - allowed == (level != HARD_BLOCKED)
    - requires_confirmation == (level == SOFT_BLOCKED)
    """

    level: EnforcementLevel
    allowed: bool
    requires_confirmation: bool
    message: EnforcementMessage
    context: EnforcementContext

    @model_validator(mode="after")
    def flags_match_level(self):
        if self.allowed != (self.level != EnforcementLevel.HARD_BLOCKED):
            raise ValueError(f"allowed={self.allowed} inconsistent with level {self.level.value}")
        if self.requires_confirmation != (self.level == EnforcementLevel.SOFT_BLOCKED):
            raise ValueError(
                f"requires_confirmation={self.requires_confirmation} inconsistent with level {self.level.value}"
            )
        return self

    class Config:
        frozen = True


# ============================================================
# Override Audit Trail
# ============================================================

class OverrideLogEntry(BaseModel):
    """
    Record of a user proceeding past a warned or soft-blocked decision.
    Write-once: never mutated or deleted by this library.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier"
    )

    user_id: str = Field(description="Actor who overrode the decision", min_length=1)

    action: EnforcementAction

    enforcement_level: EnforcementLevel = Field(
        description="Level that was bypassed: warned | soft-blocked"
    )

    health_status: CaseHealthStatus = Field(description="Case Health status at time of override")

    health_score: int = Field(ge=0, le=100, description="Case Health score at time of override")

    issue_id: Optional[str] = None
    evidence_id: Optional[str] = None
    comms_id: Optional[str] = None
    pack_id: Optional[str] = None

    reason: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Optional user-provided reason for proceeding"
    )

    plan_id: PlanId
    plan_mode: PlanMode

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the override happened"
    )

    @field_validator("enforcement_level")
    @classmethod
    def only_overridable_levels(cls, v):
        """Allowed actions need no override; hard-blocked ones cannot be overridden"""
        if not EnforcementLevel(v).is_overridable:
            raise ValueError(
                f"enforcement_level must be 'warned' or 'soft-blocked', got '{EnforcementLevel(v).value}'"
            )
        return v

    @model_validator(mode="after")
    def plan_mode_matches_plan(self):
        if plan_mode_for(self.plan_id) != self.plan_mode:
            raise ValueError(
                f"plan_mode '{self.plan_mode.value}' does not match plan '{self.plan_id.value}'"
            )
        return self

    class Config:
        frozen = True
