"""
Scoring and enforcement engines.

All functions here are pure: they take read-only records, an optional
evaluation time, and return frozen result models.
"""

from tb_core_lib.core.case_health import (
    SCORE_THRESHOLDS,
    get_status_from_score,
    score_issue,
    score_overall,
)
from tb_core_lib.core.next_step import (
    get_recommended_next_step,
    get_weakest_issue,
)
from tb_core_lib.core.pack_readiness import (
    get_pack_filename,
    get_readiness_status,
    score_pack_readiness,
)
from tb_core_lib.core.enforcement import (
    ENFORCEMENT_MATRIX,
    SCORING_WEIGHTS,
    check_enforcement,
    check_enforcement_for_score,
    get_enforcement_explanation,
    get_enforcement_message,
    get_enforcement_summary,
    is_action_blocked,
    requires_confirmation,
    soften_enforcement,
)
from tb_core_lib.core.severity import (
    calculate_severity,
    escalate_severity_by_age,
    get_display_severity,
    is_valid_severity,
)
from tb_core_lib.core.evidence_stats import (
    DocumentationGap,
    GapCode,
    IssueCaseFacts,
    build_health_inputs,
    detect_issue_gaps,
    get_issue_case_facts,
    summarize_comms,
    summarize_evidence,
)
from tb_core_lib.models.common import truncate

__all__ = [
    # Case Health
    "SCORE_THRESHOLDS",
    "get_status_from_score",
    "score_issue",
    "score_overall",
    # Next step
    "get_recommended_next_step",
    "get_weakest_issue",
    "truncate",
    # Pack Readiness
    "get_pack_filename",
    "get_readiness_status",
    "score_pack_readiness",
    # Enforcement
    "ENFORCEMENT_MATRIX",
    "SCORING_WEIGHTS",
    "check_enforcement",
    "check_enforcement_for_score",
    "get_enforcement_explanation",
    "get_enforcement_message",
    "get_enforcement_summary",
    "is_action_blocked",
    "requires_confirmation",
    "soften_enforcement",
    # Severity
    "calculate_severity",
    "escalate_severity_by_age",
    "get_display_severity",
    "is_valid_severity",
    # Evidence statistics
    "DocumentationGap",
    "GapCode",
    "IssueCaseFacts",
    "build_health_inputs",
    "detect_issue_gaps",
    "get_issue_case_facts",
    "summarize_comms",
    "summarize_evidence",
]
