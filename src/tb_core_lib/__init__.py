"""TenantBuddy Core Library

Case Health and Pack Readiness scoring, the enforcement matrix, next-step
recommendations and the override audit trail for TenantBuddy services.
"""

__version__ = "0.1.0"

# Export shared models first (no dependencies)
from tb_core_lib.models import (
    Issue, IssueStatus, Severity, IssueHealthInput, IssueForPack,
    EvidenceRecord, CommsRecord,
    CaseHealth, CaseHealthStatus, PackReadiness, PackReadinessStatus,
    EnforcementAction, EnforcementLevel, EnforcementResult, OverrideLogEntry,
    PlanId, PlanMode,
)

# Engines (depend on models only)
from tb_core_lib.core import (
    check_enforcement,
    get_recommended_next_step,
    get_weakest_issue,
    score_issue,
    score_overall,
    score_pack_readiness,
)

# Configuration
from tb_core_lib.config import (
    Settings,
    get_settings,
    reset_settings,
)


# Lazy import for the HTTP client so importing the scoring core never
# pulls in httpx
def __getattr__(name):
    """Lazy import for OverrideLogClient."""
    if name == "OverrideLogClient":
        from tb_core_lib.clients import OverrideLogClient
        return OverrideLogClient
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "Issue", "IssueStatus", "Severity", "IssueHealthInput", "IssueForPack",
    "EvidenceRecord", "CommsRecord",
    "CaseHealth", "CaseHealthStatus", "PackReadiness", "PackReadinessStatus",
    "EnforcementAction", "EnforcementLevel", "EnforcementResult", "OverrideLogEntry",
    "PlanId", "PlanMode",
    # Engines
    "check_enforcement",
    "get_recommended_next_step",
    "get_weakest_issue",
    "score_issue",
    "score_overall",
    "score_pack_readiness",
    # Clients (lazy loaded)
    "OverrideLogClient",
    # Configuration
    "Settings",
    "get_settings",
    "reset_settings",
]
