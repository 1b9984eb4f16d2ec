"""Case Health Enforcement

Protective guardrails that stop users from weakening their position through
premature or risky actions.

A decision is made in three steps:

1. Look up ENFORCEMENT_MATRIX[health_status][action] (the single source of
   truth for enforcement rules).
2. Pro plans (Advisor mode) soften the result by exactly one level:
   hard-blocked -> soft-blocked -> warned -> allowed. Free and Plus plans
   (Guided mode) get the matrix value unchanged.
3. Derive the flags and render fixed message templates.

Unknown actions, statuses or plans and malformed scores are programming
errors and raise ValueError; nothing here defaults silently.
"""

import logging
import math
import numbers
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from tb_core_lib.core.case_health import get_status_from_score
from tb_core_lib.models.enforcement import (
    EnforcementAction,
    EnforcementContext,
    EnforcementLevel,
    EnforcementMessage,
    EnforcementResult,
    PlanId,
    PlanMode,
    plan_mode_for,
)
from tb_core_lib.models.health import CaseHealthStatus

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_A = EnforcementAction
_L = EnforcementLevel

# ============================================================================
# ENFORCEMENT MATRIX
# ============================================================================

ENFORCEMENT_MATRIX: Dict[CaseHealthStatus, Dict[EnforcementAction, EnforcementLevel]] = {
    # Strong (80-100): case is well documented
    CaseHealthStatus.STRONG: {
        _A.GENERATE_PACK: _L.ALLOWED,
        _A.CLOSE_ISSUE: _L.ALLOWED,
        _A.RESOLVE_ISSUE: _L.ALLOWED,
        _A.DELETE_EVIDENCE: _L.WARNED,
        _A.DELETE_COMMS: _L.WARNED,
        _A.ARCHIVE_ISSUE: _L.ALLOWED,
    },
    # Adequate (60-79): minor gaps
    CaseHealthStatus.ADEQUATE: {
        _A.GENERATE_PACK: _L.WARNED,
        _A.CLOSE_ISSUE: _L.WARNED,
        _A.RESOLVE_ISSUE: _L.WARNED,
        _A.DELETE_EVIDENCE: _L.SOFT_BLOCKED,
        _A.DELETE_COMMS: _L.SOFT_BLOCKED,
        _A.ARCHIVE_ISSUE: _L.WARNED,
    },
    # Weak (40-59): significant gaps
    CaseHealthStatus.WEAK: {
        _A.GENERATE_PACK: _L.SOFT_BLOCKED,
        _A.CLOSE_ISSUE: _L.SOFT_BLOCKED,
        _A.RESOLVE_ISSUE: _L.SOFT_BLOCKED,
        _A.DELETE_EVIDENCE: _L.SOFT_BLOCKED,
        _A.DELETE_COMMS: _L.SOFT_BLOCKED,
        _A.ARCHIVE_ISSUE: _L.SOFT_BLOCKED,
    },
    # At-risk (0-39): case is unprotected
    CaseHealthStatus.AT_RISK: {
        _A.GENERATE_PACK: _L.HARD_BLOCKED,
        _A.CLOSE_ISSUE: _L.HARD_BLOCKED,
        _A.RESOLVE_ISSUE: _L.SOFT_BLOCKED,
        _A.DELETE_EVIDENCE: _L.HARD_BLOCKED,
        _A.DELETE_COMMS: _L.HARD_BLOCKED,
        _A.ARCHIVE_ISSUE: _L.HARD_BLOCKED,
    },
}

_SOFTENED: Dict[EnforcementLevel, EnforcementLevel] = {
    _L.HARD_BLOCKED: _L.SOFT_BLOCKED,
    _L.SOFT_BLOCKED: _L.WARNED,
    _L.WARNED: _L.ALLOWED,
    _L.ALLOWED: _L.ALLOWED,
}


def _validate_matrix() -> None:
    """The matrix must cover every (status, action) pair."""
    for status in CaseHealthStatus:
        row = ENFORCEMENT_MATRIX.get(status)
        if row is None:
            raise ValueError(f"Enforcement matrix has no row for status '{status.value}'")
        missing = [a.value for a in EnforcementAction if a not in row]
        if missing:
            raise ValueError(
                f"Enforcement matrix row '{status.value}' is missing actions: {missing}"
            )


_validate_matrix()


def soften_enforcement(level: EnforcementLevel) -> EnforcementLevel:
    """Advisor mode softens enforcement by one level (allowed stays allowed)."""
    return _SOFTENED[EnforcementLevel(level)]


# ============================================================================
# SCORING WEIGHTS
# ============================================================================

# Share of the 100-point Case Health basis carried by each factor
SCORING_WEIGHTS: Dict[str, float] = {
    "evidence": 0.30,
    "communications": 0.25,
    "severity": 0.15,
    "documentation": 0.15,
    "recency": 0.15,
}


# ============================================================================
# ENFORCEMENT MESSAGES
# ============================================================================

ACTION_LABELS: Dict[EnforcementAction, str] = {
    _A.GENERATE_PACK: "Generate Evidence Pack",
    _A.CLOSE_ISSUE: "Close Issue",
    _A.RESOLVE_ISSUE: "Mark as Resolved",
    _A.DELETE_EVIDENCE: "Delete Evidence",
    _A.DELETE_COMMS: "Delete Communication Log",
    _A.ARCHIVE_ISSUE: "Archive Issue",
}

ACTION_RISK_DESCRIPTIONS: Dict[EnforcementAction, str] = {
    _A.GENERATE_PACK: (
        "Generating a pack with incomplete documentation may weaken your position "
        "if used in a dispute."
    ),
    _A.CLOSE_ISSUE: (
        "Closing an issue without sufficient evidence or communication records may "
        "limit your options if the problem recurs."
    ),
    _A.RESOLVE_ISSUE: (
        "Marking this as resolved will move it out of your active case. "
        "Ensure you have documented the resolution."
    ),
    _A.DELETE_EVIDENCE: (
        "Deleting evidence permanently removes it from your case. "
        "This cannot be undone and may weaken your position."
    ),
    _A.DELETE_COMMS: (
        "Deleting communication logs removes your documentation of landlord/agent contact. "
        "This cannot be undone."
    ),
    _A.ARCHIVE_ISSUE: (
        "Archiving this issue will remove it from your active case without "
        "resolution documentation."
    ),
}


def get_enforcement_message(
    action: EnforcementAction,
    level: EnforcementLevel,
    status: CaseHealthStatus,
    mode: PlanMode,
) -> EnforcementMessage:
    """
    Render the fixed copy for a decision.

    Guided mode uses protective, educational wording; Advisor mode is
    neutral and informational.
    """
    action_label = ACTION_LABELS[action]
    risk = ACTION_RISK_DESCRIPTIONS[action]
    status_text = status.value
    guided = mode == PlanMode.GUIDED

    if level == _L.ALLOWED:
        return EnforcementMessage(
            title=action_label,
            description=f"Your case is in {status_text} health. Proceed when ready.",
        )

    if level == _L.WARNED:
        return EnforcementMessage(
            title="Consider Before Proceeding" if guided else "Note",
            description=(
                f'Your case health is "{status_text}". {risk}'
                if guided
                else f"Case health: {status_text}. {risk}"
            ),
            warning_text=(
                "We recommend addressing the gaps in your documentation first."
                if guided
                else None
            ),
        )

    if level == _L.SOFT_BLOCKED:
        return EnforcementMessage(
            title="Are You Sure? Your Case Has Gaps" if guided else f"Confirm {action_label}",
            description=(
                f'Your case health is "{status_text}", indicating significant documentation gaps. {risk}'
                if guided
                else f"Case health is {status_text}. {risk}"
            ),
            confirm_label="I Understand the Risk - Proceed Anyway" if guided else "Proceed",
            cancel_label="Go Back and Strengthen Case" if guided else "Cancel",
            warning_text=(
                "This action will be logged. Consider improving your case documentation first."
                if guided
                else "This action will be logged for your records."
            ),
        )

    return EnforcementMessage(
        title="Action Blocked - Case Not Ready" if guided else f"Cannot {action_label}",
        description=(
            f'Your case health is "{status_text}", which means your documentation is '
            f"insufficient to proceed safely. {risk}"
            if guided
            else f'Case health of "{status_text}" prevents this action. Improve documentation first.'
        ),
        cancel_label="Go Back",
        warning_text=(
            "Build your case by adding evidence and logging communications before "
            "attempting this action."
            if guided
            else "Minimum documentation requirements not met."
        ),
    )


# ============================================================================
# INPUT VALIDATION
# ============================================================================


def _coerce(enum_cls: Type[E], value: Any, what: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(
            f"Unknown {what}: {value!r}. Known values: {[m.value for m in enum_cls]}"
        ) from None


def _validate_score(score: Any) -> float:
    if isinstance(score, bool) or not isinstance(score, numbers.Real):
        raise ValueError(f"health_score must be a number, got {type(score).__name__}")
    score = float(score)
    if math.isnan(score) or not 0 <= score <= 100:
        raise ValueError(f"health_score must be within 0-100, got {score}")
    return score


# ============================================================================
# MAIN ENFORCEMENT FUNCTION
# ============================================================================


def check_enforcement(
    action: EnforcementAction,
    health_status: CaseHealthStatus,
    health_score: float,
    plan_id: PlanId,
) -> EnforcementResult:
    """
    Check if an action is allowed based on Case Health and plan.

    Args:
        action: The action being attempted
        health_status: Current Case Health status
        health_score: Current Case Health score (0-100)
        plan_id: User's plan

    Returns:
        EnforcementResult with level, flags, messages and context

    Raises:
        ValueError: On unknown enum values or a malformed score
    """
    action = _coerce(EnforcementAction, action, "enforcement action")
    health_status = _coerce(CaseHealthStatus, health_status, "health status")
    plan_id = _coerce(PlanId, plan_id, "plan")
    score = _validate_score(health_score)

    mode = plan_mode_for(plan_id)
    level = ENFORCEMENT_MATRIX[health_status][action]
    if mode == PlanMode.ADVISOR:
        level = soften_enforcement(level)

    logger.debug(
        f"Enforcement {action.value} @ {health_status.value}/{score:g} "
        f"plan={plan_id.value} -> {level.value}"
    )

    return EnforcementResult(
        level=level,
        allowed=level != _L.HARD_BLOCKED,
        requires_confirmation=level == _L.SOFT_BLOCKED,
        message=get_enforcement_message(action, level, health_status, mode),
        context=EnforcementContext(
            action=action,
            health_status=health_status,
            health_score=score,
            plan_mode=mode,
            plan_id=plan_id,
        ),
    )


def check_enforcement_for_score(
    action: EnforcementAction, health_score: float, plan_id: PlanId
) -> EnforcementResult:
    """Same as check_enforcement, deriving the status from the score."""
    score = _validate_score(health_score)
    return check_enforcement(action, get_status_from_score(score), score, plan_id)


# ============================================================================
# QUICK CHECKS
# ============================================================================


def is_action_blocked(
    action: EnforcementAction, health_status: CaseHealthStatus, plan_id: PlanId
) -> bool:
    """True when the action is hard-blocked for this status and plan."""
    return not check_enforcement(action, health_status, 0, plan_id).allowed


def requires_confirmation(
    action: EnforcementAction, health_status: CaseHealthStatus, plan_id: PlanId
) -> bool:
    """True when the action needs explicit risk acknowledgment."""
    return check_enforcement(action, health_status, 0, plan_id).requires_confirmation


def get_enforcement_summary(
    health_status: CaseHealthStatus, plan_id: PlanId
) -> Dict[EnforcementAction, EnforcementLevel]:
    """Effective level of every action for a status and plan."""
    return {
        action: check_enforcement(action, health_status, 0, plan_id).level
        for action in EnforcementAction
    }


def get_enforcement_explanation(plan_mode: PlanMode) -> str:
    """User-facing explanation of the enforcement mode."""
    if _coerce(PlanMode, plan_mode, "plan mode") == PlanMode.GUIDED:
        return (
            "Guided Mode protects your case by requiring confirmation for risky actions "
            "when your documentation has gaps. This helps prevent accidentally weakening "
            "your position."
        )
    return (
        "Advisor Mode gives you more flexibility while still logging important actions. "
        "You'll see recommendations but have more control over your workflow."
    )
