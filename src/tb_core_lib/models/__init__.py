"""
Shared data models for the tenancy case core.

This package provides the Pydantic models consumed and produced by the
scoring and enforcement engines. Inputs are read-only records from the
persistence layer; outputs are frozen value objects.
"""

from tb_core_lib.models.issue import (
    # Primitives
    IssueStatus,
    Severity,
    CommsDirection,

    # Inputs
    Issue,
    IssueForPack,
    EvidenceRecord,
    CommsRecord,
    IssueHealthInput,

    # Aggregates
    EvidenceSummary,
    CommsSummary,
)

from tb_core_lib.models.health import (
    CaseHealth,
    CaseHealthStatus,
    Factor,
    FactorStatus,
    NextStep,
    NextStepIcon,
    Urgency,
    WeakestIssue,
)

from tb_core_lib.models.pack import (
    PackCoverage,
    PackReadiness,
    PackReadinessStatus,
    PackWarning,
    WarningType,
)

from tb_core_lib.models.enforcement import (
    EnforcementAction,
    EnforcementContext,
    EnforcementLevel,
    EnforcementMessage,
    EnforcementResult,
    OverrideLogEntry,
    PlanId,
    PlanMode,
    plan_mode_for,
)

__all__ = [
    # Primitives
    "IssueStatus", "Severity", "CommsDirection",
    # Inputs
    "Issue", "IssueForPack", "EvidenceRecord", "CommsRecord", "IssueHealthInput",
    # Aggregates
    "EvidenceSummary", "CommsSummary",
    # Case Health
    "CaseHealth", "CaseHealthStatus", "Factor", "FactorStatus",
    "NextStep", "NextStepIcon", "Urgency", "WeakestIssue",
    # Pack Readiness
    "PackCoverage", "PackReadiness", "PackReadinessStatus", "PackWarning", "WarningType",
    # Enforcement
    "EnforcementAction", "EnforcementContext", "EnforcementLevel",
    "EnforcementMessage", "EnforcementResult", "OverrideLogEntry",
    "PlanId", "PlanMode", "plan_mode_for",
]
