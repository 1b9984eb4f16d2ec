"""Case Health Scoring

Purpose: Estimate how strong a tenant's position would be if a dispute
escalated, as a 0-100 score with a status band.

Five independent factors are computed per issue from the inputs alone
(no external calls) and summed on a 100-point basis:

    Factor                  Max   Rule
    Issue documented         15   description > 20 chars
    Evidence collected       30   0/1/2/3-4/5+ items -> 0/10/18/25/30
    Communication logged     25   0/1/2-3/4+ entries -> 0/12/20/25
    Recent activity          15   <=3d / <=7d / <=14d / older -> 15/12/8/3
    Severity classified      15   missing or Low -> 10, otherwise 15

Across issues the weakest link wins: the overall score is the minimum of
the active issues' scores, never an average.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from tb_core_lib.models.common import latest, utc_now, whole_days_between
from tb_core_lib.models.health import CaseHealth, CaseHealthStatus, Factor, FactorStatus
from tb_core_lib.models.issue import IssueHealthInput, Severity

logger = logging.getLogger(__name__)

# Factor names double as merge keys in score_overall()
FACTOR_DOCUMENTATION = "Issue documented"
FACTOR_EVIDENCE = "Evidence collected"
FACTOR_COMMUNICATION = "Communication logged"
FACTOR_RECENCY = "Recent activity"
FACTOR_SEVERITY = "Severity classified"

MIN_DESCRIPTION_LENGTH = 20
STALE_AFTER_DAYS = 14
MAX_OVERALL_FACTORS = 3

SCORE_THRESHOLDS: Dict[CaseHealthStatus, int] = {
    CaseHealthStatus.STRONG: 80,    # 80-100
    CaseHealthStatus.ADEQUATE: 60,  # 60-79
    CaseHealthStatus.WEAK: 40,      # 40-59
    CaseHealthStatus.AT_RISK: 0,    # 0-39
}

_STATUS_COPY: Dict[CaseHealthStatus, Tuple[str, str]] = {
    CaseHealthStatus.STRONG: (
        "Strong",
        "Your documentation is solid. Continue maintaining records.",
    ),
    CaseHealthStatus.ADEQUATE: (
        "Adequate",
        "Your case has some gaps. Address the recommendations below.",
    ),
    CaseHealthStatus.WEAK: (
        "Weak",
        "Your position is vulnerable. Take action to strengthen your case.",
    ),
    CaseHealthStatus.AT_RISK: (
        "At Risk",
        "Your case is unprotected. Immediate action required.",
    ),
}


# =============================================================================
# Banding
# =============================================================================


def get_status_from_score(score: float) -> CaseHealthStatus:
    """Map a 0-100 score onto its Case Health band."""
    if score >= SCORE_THRESHOLDS[CaseHealthStatus.STRONG]:
        return CaseHealthStatus.STRONG
    if score >= SCORE_THRESHOLDS[CaseHealthStatus.ADEQUATE]:
        return CaseHealthStatus.ADEQUATE
    if score >= SCORE_THRESHOLDS[CaseHealthStatus.WEAK]:
        return CaseHealthStatus.WEAK
    return CaseHealthStatus.AT_RISK


def _build_health(score: int, factors: List[Factor]) -> CaseHealth:
    status = get_status_from_score(score)
    label, description = _STATUS_COPY[status]
    return CaseHealth(
        score=score,
        status=status,
        status_label=label,
        status_description=description,
        factors=factors,
    )


# =============================================================================
# Individual factors
# =============================================================================


def _documentation_factor(description: Optional[str]) -> Factor:
    if description and len(description) > MIN_DESCRIPTION_LENGTH:
        return Factor(name=FACTOR_DOCUMENTATION, score=15, max_score=15, status=FactorStatus.GOOD)
    return Factor(
        name=FACTOR_DOCUMENTATION,
        score=5,
        max_score=15,
        status=FactorStatus.WARNING,
        recommendation="Add a detailed description to strengthen your case",
    )


def _evidence_factor(count: int) -> Factor:
    if count == 0:
        return Factor(
            name=FACTOR_EVIDENCE, score=0, max_score=30, status=FactorStatus.CRITICAL,
            recommendation="Upload photos or documents as evidence immediately",
        )
    if count == 1:
        return Factor(
            name=FACTOR_EVIDENCE, score=10, max_score=30, status=FactorStatus.WARNING,
            recommendation="Add more evidence to strengthen your position",
        )
    if count == 2:
        return Factor(
            name=FACTOR_EVIDENCE, score=18, max_score=30, status=FactorStatus.WARNING,
            recommendation="One more piece of evidence would help",
        )
    if count < 5:
        return Factor(name=FACTOR_EVIDENCE, score=25, max_score=30, status=FactorStatus.GOOD)
    return Factor(name=FACTOR_EVIDENCE, score=30, max_score=30, status=FactorStatus.GOOD)


def _communication_factor(count: int) -> Factor:
    if count == 0:
        return Factor(
            name=FACTOR_COMMUNICATION, score=0, max_score=25, status=FactorStatus.CRITICAL,
            recommendation="Log your communication with the landlord/agent",
        )
    if count == 1:
        return Factor(
            name=FACTOR_COMMUNICATION, score=12, max_score=25, status=FactorStatus.WARNING,
            recommendation="Document any follow-up communications",
        )
    if count < 4:
        return Factor(name=FACTOR_COMMUNICATION, score=20, max_score=25, status=FactorStatus.GOOD)
    return Factor(name=FACTOR_COMMUNICATION, score=25, max_score=25, status=FactorStatus.GOOD)


def _recency_factor(days_since_activity: int) -> Factor:
    if days_since_activity <= 3:
        return Factor(name=FACTOR_RECENCY, score=15, max_score=15, status=FactorStatus.GOOD)
    if days_since_activity <= 7:
        return Factor(name=FACTOR_RECENCY, score=12, max_score=15, status=FactorStatus.GOOD)
    if days_since_activity <= STALE_AFTER_DAYS:
        return Factor(
            name=FACTOR_RECENCY, score=8, max_score=15, status=FactorStatus.WARNING,
            recommendation=(
                f"No activity in {days_since_activity} days - add updates to show ongoing effort"
            ),
        )
    return Factor(
        name=FACTOR_RECENCY, score=3, max_score=15, status=FactorStatus.CRITICAL,
        recommendation="Issue appears dormant - add evidence or log a follow-up",
    )


def _severity_factor(severity: Optional[Severity]) -> Factor:
    if severity is None or severity == Severity.LOW:
        return Factor(
            name=FACTOR_SEVERITY, score=10, max_score=15, status=FactorStatus.WARNING,
            recommendation="Review if severity level is accurate for your situation",
        )
    return Factor(name=FACTOR_SEVERITY, score=15, max_score=15, status=FactorStatus.GOOD)


# =============================================================================
# Public API
# =============================================================================


def score_issue(data: IssueHealthInput, now: Optional[datetime] = None) -> CaseHealth:
    """
    Calculate Case Health for a single issue.

    Args:
        data: Issue plus pre-aggregated evidence/communication counts and
            last-activity timestamps
        now: Evaluation time (default: current UTC time); pass a fixed value
            for reproducible results

    Returns:
        CaseHealth with the five factors in fixed order
    """
    now = now or utc_now()
    issue = data.issue

    last_activity = latest(data.last_comms_at, data.last_evidence_at, issue.updated_at)
    days_since_activity = whole_days_between(now, last_activity)

    factors = [
        _documentation_factor(issue.description),
        _evidence_factor(data.evidence_count),
        _communication_factor(data.comms_count),
        _recency_factor(days_since_activity),
        _severity_factor(issue.severity),
    ]

    total = sum(f.score for f in factors)
    maximum = sum(f.max_score for f in factors)
    score = round(total / maximum * 100)

    logger.debug(
        f"Issue {issue.id} health: score={score} "
        f"(evidence={data.evidence_count}, comms={data.comms_count}, "
        f"idle_days={days_since_activity})"
    )
    return _build_health(score, factors)


def _merge_factors(healths: Iterable[CaseHealth]) -> List[Factor]:
    """Union of non-good factors, one per name, keeping the most severe."""
    merged: Dict[str, Factor] = {}
    for health in healths:
        for factor in health.factors:
            if factor.status == FactorStatus.GOOD:
                continue
            existing = merged.get(factor.name)
            if existing is None or factor.status.priority <= existing.status.priority:
                merged[factor.name] = factor

    ranked = sorted(merged.values(), key=lambda f: f.status.priority)
    return ranked[:MAX_OVERALL_FACTORS]


def score_overall(items: Iterable[IssueHealthInput], now: Optional[datetime] = None) -> CaseHealth:
    """
    Calculate overall Case Health across all issues.

    Only OPEN / IN_PROGRESS issues count. With none active the case is
    reported as strong (an empty case is a success, not a zero score).

    Args:
        items: Per-issue health inputs
        now: Evaluation time (default: current UTC time)

    Returns:
        CaseHealth whose score is the minimum active-issue score and whose
        factors are the three most severe distinct gaps
    """
    now = now or utc_now()
    active = [d for d in items if d.issue.is_active]

    if not active:
        return CaseHealth(
            score=100,
            status=CaseHealthStatus.STRONG,
            status_label="No Active Issues",
            status_description="You have no unresolved issues at this time.",
            factors=[],
        )

    healths = [score_issue(d, now=now) for d in active]
    lowest = min(h.score for h in healths)

    logger.debug(f"Overall health over {len(active)} active issues: weakest={lowest}")
    return _build_health(lowest, _merge_factors(healths))
