"""Next-step recommendations layered on Case Health."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from tb_core_lib.core.case_health import FACTOR_RECENCY, score_issue
from tb_core_lib.models.common import truncate
from tb_core_lib.models.health import (
    CaseHealth,
    FactorStatus,
    NextStep,
    NextStepIcon,
    Urgency,
    WeakestIssue,
)
from tb_core_lib.models.issue import IssueHealthInput

logger = logging.getLogger(__name__)

PACK_READY_MIN_EVIDENCE = 3
PACK_READY_MIN_SCORE = 70


def get_recommended_next_step(data: IssueHealthInput, health: CaseHealth) -> NextStep:
    """
    Get the single most important next step for an issue.

    Rules are checked in priority order and the first match wins; the last
    rule always matches.
    """
    issue = data.issue
    title = truncate(issue.title, 30)

    # 1. High-severity issue with nothing to back it up
    if data.evidence_count == 0 and issue.has_high_severity:
        return NextStep(
            action="Add Evidence Now",
            description=(
                f'"{title}" is {issue.severity.value} severity with no evidence. '
                "Add photos or documents immediately."
            ),
            href=f"/evidence/upload?issueId={issue.id}",
            urgency=Urgency.CRITICAL,
            icon=NextStepIcon.UPLOAD,
        )

    if data.evidence_count == 0:
        return NextStep(
            action="Add Evidence",
            description=(
                f'"{title}" has no supporting evidence. '
                "Upload photos or documents to protect your position."
            ),
            href=f"/evidence/upload?issueId={issue.id}",
            urgency=Urgency.HIGH,
            icon=NextStepIcon.UPLOAD,
        )

    if data.comms_count == 0:
        return NextStep(
            action="Log Communication",
            description=f'Document your communication with the landlord/agent about "{title}".',
            href=f"/comms/new?issueId={issue.id}",
            urgency=Urgency.HIGH,
            icon=NextStepIcon.MESSAGE,
        )

    recency = health.factor(FACTOR_RECENCY)
    if recency is not None and recency.status == FactorStatus.CRITICAL:
        return NextStep(
            action="Follow Up",
            description=f'"{title}" has been inactive. Send a follow-up or add new evidence.',
            href=f"/comms/new?issueId={issue.id}",
            urgency=Urgency.MEDIUM,
            icon=NextStepIcon.MESSAGE,
        )

    if (
        data.evidence_count >= PACK_READY_MIN_EVIDENCE
        and data.comms_count >= 1
        and health.score >= PACK_READY_MIN_SCORE
    ):
        return NextStep(
            action="Prepare Evidence Pack",
            description=f'"{title}" is well documented. Generate an evidence pack for tribunal.',
            href=f"/packs/new?issueId={issue.id}",
            urgency=Urgency.LOW,
            icon=NextStepIcon.DOCUMENT,
        )

    return NextStep(
        action="Strengthen Case",
        description=f'Add more evidence to "{title}" to improve your position.',
        href=f"/evidence/upload?issueId={issue.id}",
        urgency=Urgency.MEDIUM,
        icon=NextStepIcon.UPLOAD,
    )


def get_weakest_issue(
    items: Iterable[IssueHealthInput], now: Optional[datetime] = None
) -> Optional[WeakestIssue]:
    """
    Find the active issue that most needs attention.

    Returns:
        The lowest-scoring OPEN / IN_PROGRESS issue with its health and
        recommended next step, or None when nothing is active. Ties keep
        input order.
    """
    scored = [(d, score_issue(d, now=now)) for d in items if d.issue.is_active]
    if not scored:
        return None

    scored.sort(key=lambda pair: pair[1].score)
    data, health = scored[0]
    step = get_recommended_next_step(data, health)

    logger.debug(f"Weakest issue {data.issue.id} (score={health.score}) -> {step.action}")
    return WeakestIssue(issue=data.issue, health=health, recommendation=step)
