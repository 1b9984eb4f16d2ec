"""Pack Readiness Scoring

Purpose: Judge how complete a *candidate* Evidence Pack selection is before
it is generated, independently of Case Health.

The score starts at 100 and loses points for gaps:

    Coverage gap                          -round((1 - included/open) * 30)
    Excluded Urgent/High issue            -25 each   (critical)
    Excluded issue that has evidence      -10 each   (warning)
    Excluded issue with comms only          0        (warning)
    Included issue with no evidence       -15 each   (warning)
    Included issue with no comms           -5 each   (info)
    Included issues idle > 14 days          0        (info, one summary)

Any critical warning caps the band at "weak": a pack that leaves out an
Urgent or High issue is never reported as strong or moderate.
"""

import logging
import math
import re
from collections import Counter
from datetime import date, datetime
from typing import AbstractSet, Dict, Iterable, List, Optional, Tuple

from tb_core_lib.core.case_health import STALE_AFTER_DAYS
from tb_core_lib.models.common import truncate, utc_now, whole_days_between
from tb_core_lib.models.issue import CommsRecord, IssueForPack
from tb_core_lib.models.pack import (
    PackCoverage,
    PackReadiness,
    PackReadinessStatus,
    PackWarning,
    WarningType,
)

logger = logging.getLogger(__name__)

COVERAGE_PENALTY = 30
EXCLUDED_HIGH_SEVERITY_PENALTY = 25
EXCLUDED_WITH_EVIDENCE_PENALTY = 10
INCLUDED_NO_EVIDENCE_PENALTY = 15
INCLUDED_NO_COMMS_PENALTY = 5

_STATUS_COPY: Dict[PackReadinessStatus, Tuple[str, str]] = {
    PackReadinessStatus.STRONG: (
        "Strong",
        "This pack comprehensively covers your open issues with supporting evidence.",
    ),
    PackReadinessStatus.MODERATE: (
        "Moderate",
        "This pack covers most issues but has some gaps. Review warnings before submission.",
    ),
    PackReadinessStatus.WEAK: (
        "Weak",
        "This pack has significant gaps that may weaken your position. "
        "Address issues before submitting.",
    ),
    PackReadinessStatus.HIGH_RISK: (
        "High Risk",
        "Critical issues are excluded or lack documentation. "
        "This pack may harm your position if submitted as-is.",
    ),
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plural(count: int, singular: str = "", plural: str = "s") -> str:
    return singular if count == 1 else plural


def get_readiness_status(score: int, warnings: List[PackWarning]) -> PackReadinessStatus:
    """
    Band a readiness score.

    Thresholds are 80/60/40. A critical warning rules out STRONG and
    MODERATE; below 40 the pack is HIGH_RISK whether or not anything is
    critical.
    """
    has_critical = any(w.type == WarningType.CRITICAL for w in warnings)

    if score >= 80 and not has_critical:
        return PackReadinessStatus.STRONG
    if score >= 60 and not has_critical:
        return PackReadinessStatus.MODERATE
    if score >= 40:
        return PackReadinessStatus.WEAK
    return PackReadinessStatus.HIGH_RISK


def score_pack_readiness(
    all_issues: Iterable[IssueForPack],
    selected_ids: AbstractSet[str],
    comms: Iterable[CommsRecord],
    now: Optional[datetime] = None,
) -> PackReadiness:
    """
    Calculate pack readiness for a selection of issues.

    Args:
        all_issues: Every issue the user has, with attached evidence
        selected_ids: Ids of the issues chosen for the pack
        comms: Communication log rows (only ``issue_id`` is used)
        now: Evaluation time (default: current UTC time)

    Returns:
        PackReadiness with warnings ordered critical -> warning -> info
    """
    now = now or utc_now()
    issues = list(all_issues)

    comms_counts: Counter = Counter(c.issue_id for c in comms if c.issue_id is not None)

    open_issues = [i for i in issues if i.is_active]
    included = [i for i in open_issues if i.id in selected_ids]
    excluded = [i for i in open_issues if i.id not in selected_ids]

    coverage = PackCoverage(
        included_issues=len(included),
        excluded_issues=len(excluded),
        total_open_issues=len(open_issues),
    )

    # ------------------------------------------------------------------
    # Classify excluded issues (each lands in at most one bucket)
    # ------------------------------------------------------------------
    excluded_high = [i for i in excluded if i.has_high_severity]
    excluded_with_evidence = [
        i for i in excluded if not i.has_high_severity and i.evidence_count > 0
    ]
    excluded_with_comms = [
        i for i in excluded
        if not i.has_high_severity and i.evidence_count == 0 and comms_counts[i.id] > 0
    ]

    # ------------------------------------------------------------------
    # Classify included issues
    # ------------------------------------------------------------------
    included_no_evidence = [i for i in included if i.evidence_count == 0]
    included_no_comms = [
        i for i in included if i.evidence_count > 0 and comms_counts[i.id] == 0
    ]
    stale = [
        i for i in included if whole_days_between(now, i.updated_at) > STALE_AFTER_DAYS
    ]

    # ------------------------------------------------------------------
    # Warnings, in severity order
    # ------------------------------------------------------------------
    warnings: List[PackWarning] = []

    for issue in excluded_high:
        warnings.append(PackWarning(
            type=WarningType.CRITICAL,
            title="High-Severity Issue Excluded",
            message=(
                f'"{truncate(issue.title, 40)}" is {issue.severity.value} severity and will NOT '
                "be included in this pack. This may significantly weaken your position."
            ),
            issue_id=issue.id,
            issue_title=issue.title,
        ))

    for issue in excluded_with_evidence:
        count = issue.evidence_count
        warnings.append(PackWarning(
            type=WarningType.WARNING,
            title="Issue with Evidence Excluded",
            message=(
                f'"{truncate(issue.title, 40)}" has {count} evidence item{_plural(count)} '
                "but will NOT be included."
            ),
            issue_id=issue.id,
            issue_title=issue.title,
        ))

    for issue in excluded_with_comms:
        count = comms_counts[issue.id]
        warnings.append(PackWarning(
            type=WarningType.WARNING,
            title="Issue with Communications Excluded",
            message=(
                f'"{truncate(issue.title, 40)}" has {count} logged communication{_plural(count)} '
                "but will NOT be included."
            ),
            issue_id=issue.id,
            issue_title=issue.title,
        ))

    for issue in included_no_evidence:
        warnings.append(PackWarning(
            type=WarningType.WARNING,
            title="Issue Lacks Evidence",
            message=f'"{truncate(issue.title, 40)}" is included but has no supporting evidence.',
            issue_id=issue.id,
            issue_title=issue.title,
        ))

    for issue in included_no_comms:
        warnings.append(PackWarning(
            type=WarningType.INFO,
            title="No Communications Logged",
            message=(
                f'"{truncate(issue.title, 40)}" has no documented communication '
                "with landlord/agent."
            ),
            issue_id=issue.id,
            issue_title=issue.title,
        ))

    if stale:
        count = len(stale)
        warnings.append(PackWarning(
            type=WarningType.INFO,
            title="Stale Documentation",
            message=(
                f"{count} issue{_plural(count)} included "
                f"ha{_plural(count, 's', 've')} not been updated in over {STALE_AFTER_DAYS} days."
            ),
        ))

    # ------------------------------------------------------------------
    # Score
    # ------------------------------------------------------------------
    score = 100
    if coverage.total_open_issues > 0:
        ratio = coverage.included_issues / coverage.total_open_issues
        score -= _round_half_up((1 - ratio) * COVERAGE_PENALTY)
    score -= len(excluded_high) * EXCLUDED_HIGH_SEVERITY_PENALTY
    score -= len(excluded_with_evidence) * EXCLUDED_WITH_EVIDENCE_PENALTY
    score -= len(included_no_evidence) * INCLUDED_NO_EVIDENCE_PENALTY
    score -= len(included_no_comms) * INCLUDED_NO_COMMS_PENALTY
    score = max(0, min(100, score))

    status = get_readiness_status(score, warnings)
    label, description = _STATUS_COPY[status]

    requires_confirmation = (
        status in [PackReadinessStatus.WEAK, PackReadinessStatus.HIGH_RISK]
        or len(excluded_high) > 0
        or (len(excluded) > 0 and coverage.included_issues < coverage.total_open_issues)
    )

    logger.debug(
        f"Pack readiness: score={score} status={status.value} "
        f"included={coverage.included_issues}/{coverage.total_open_issues} "
        f"warnings={len(warnings)}"
    )

    return PackReadiness(
        score=score,
        status=status,
        status_label=label,
        status_description=description,
        warnings=warnings,
        coverage=coverage,
        requires_confirmation=requires_confirmation,
    )


def get_pack_filename(property_address: str, on: Optional[date] = None) -> str:
    """
    Build the professional filename for a generated pack.

    Example:
        >>> get_pack_filename("12 Smith St, Carlton VIC", date(2025, 3, 1))
        'Evidence_Pack_12_Smith_St_Carlton_VIC_2025-03-01.pdf'
    """
    on = on or utc_now().date()
    if isinstance(on, datetime):
        on = on.date()
    clean = re.sub(r"[^\w\s-]", "", property_address, flags=re.ASCII)
    clean = re.sub(r"\s+", "_", clean, flags=re.ASCII)[:40]
    clean = clean.rstrip("_")
    return f"Evidence_Pack_{clean}_{on.isoformat()}.pdf"
