"""Canonical evidence and communication statistics.

Every count the scorers see comes from here, so UI, API routes and the
PDF generator agree on the numbers. Records are always matched on
``issue_id`` and nothing else.

Key Functions:
- summarize_evidence(): EvidenceSummary for one issue
- summarize_comms(): CommsSummary for one issue (inbound/outbound split)
- get_issue_case_facts(): days open, notice and response status
- detect_issue_gaps(): documentation gaps for an issue
- build_health_inputs(): IssueHealthInput for every issue in one pass
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from tb_core_lib.models.common import ensure_utc, latest, utc_now, whole_days_between
from tb_core_lib.models.issue import (
    CommsRecord,
    CommsSummary,
    EvidenceRecord,
    EvidenceSummary,
    Issue,
    IssueHealthInput,
)

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"photo", "screenshot"}
DOCUMENT_TYPES = {"pdf", "document"}
DEFAULT_STALE_EVIDENCE_DAYS = 90


def is_image_evidence(evidence_type: str) -> bool:
    return (evidence_type or "").lower() in IMAGE_TYPES


def is_document_evidence(evidence_type: str) -> bool:
    return (evidence_type or "").lower() in DOCUMENT_TYPES


# =============================================================================
# Per-issue summaries
# =============================================================================


def summarize_evidence(issue_id: str, evidence: Iterable[EvidenceRecord]) -> EvidenceSummary:
    """Aggregate the evidence attached to one issue."""
    items = [e for e in evidence if e.issue_id == issue_id]
    images = [e for e in items if is_image_evidence(e.type)]
    documents = [e for e in items if is_document_evidence(e.type)]

    return EvidenceSummary(
        total_count=len(items),
        image_count=len(images),
        document_count=len(documents),
        last_evidence_at=latest(*(e.occurred_at for e in items)),
        evidence_ids=[e.id for e in items],
        image_ids=[e.id for e in images],
    )


def summarize_comms(issue_id: str, comms: Iterable[CommsRecord]) -> CommsSummary:
    """Aggregate the communication log for one issue."""
    items = [c for c in comms if c.issue_id == issue_id]
    inbound = [c for c in items if c.is_inbound]
    outbound = [c for c in items if not c.is_inbound]

    return CommsSummary(
        total_count=len(items),
        outbound_count=len(outbound),
        inbound_count=len(inbound),
        last_outbound_at=latest(*(c.occurred_at for c in outbound)),
        last_inbound_at=latest(*(c.occurred_at for c in inbound)),
        last_comms_at=latest(*(c.occurred_at for c in items)),
    )


# =============================================================================
# Case facts & gaps
# =============================================================================


class IssueCaseFacts(BaseModel):
    """Plain facts about one issue, as printed in an evidence pack"""

    days_open: int = Field(ge=0)
    notice_status: str = Field(description="'Sent' | 'Not sent'")
    response_status: str
    evidence: EvidenceSummary
    comms: CommsSummary

    class Config:
        frozen = True


class GapCode(str, Enum):
    NO_COMMS = "no_comms"
    NO_RESPONSE = "no_response"
    NO_EVIDENCE = "no_evidence"
    NO_IMAGES = "no_images"
    STALE_EVIDENCE = "stale_evidence"


class DocumentationGap(BaseModel):
    """Something missing from an issue's record"""

    type: str = Field(description="critical | warning | info")
    issue_id: str
    issue_title: str
    description: str
    code: GapCode

    class Config:
        frozen = True


def _format_date(value: datetime) -> str:
    # e.g. "5 Mar 2025"
    return f"{value.day} {value.strftime('%b %Y')}"


def get_issue_case_facts(
    issue: Issue,
    evidence: Sequence[EvidenceRecord],
    comms: Sequence[CommsRecord],
    as_of: Optional[datetime] = None,
) -> IssueCaseFacts:
    """Combine evidence/comms summaries with derived notice and response facts."""
    as_of = ensure_utc(as_of or utc_now())
    evidence_summary = summarize_evidence(issue.id, evidence)
    comms_summary = summarize_comms(issue.id, comms)

    response_status = (
        "Response recorded"
        if comms_summary.has_response
        else f"No response recorded as of {_format_date(as_of)}"
    )

    return IssueCaseFacts(
        days_open=max(0, whole_days_between(as_of, issue.created_at)),
        notice_status="Sent" if comms_summary.has_notice else "Not sent",
        response_status=response_status,
        evidence=evidence_summary,
        comms=comms_summary,
    )


def detect_issue_gaps(
    issue: Issue,
    facts: IssueCaseFacts,
    stale_days: int = DEFAULT_STALE_EVIDENCE_DAYS,
    now: Optional[datetime] = None,
) -> List[DocumentationGap]:
    """List documentation gaps; missing records are critical for Urgent/High issues."""
    missing_type = "critical" if issue.has_high_severity else "warning"
    gaps: List[DocumentationGap] = []

    def gap(kind: str, description: str, code: GapCode) -> None:
        gaps.append(DocumentationGap(
            type=kind,
            issue_id=issue.id,
            issue_title=issue.title,
            description=description,
            code=code,
        ))

    if facts.comms.total_count == 0:
        gap(missing_type, "No communications logged", GapCode.NO_COMMS)

    if facts.comms.has_notice and not facts.comms.has_response:
        gap("info", "Notice sent, no response recorded", GapCode.NO_RESPONSE)

    if facts.evidence.total_count == 0:
        gap(missing_type, "No evidence attached", GapCode.NO_EVIDENCE)
    elif facts.evidence.image_count == 0:
        gap("warning", "No photo/screenshot evidence", GapCode.NO_IMAGES)

    if facts.evidence.last_evidence_at is not None:
        age = whole_days_between(now or utc_now(), facts.evidence.last_evidence_at)
        if age > stale_days:
            gap("info", f"Evidence is {age} days old", GapCode.STALE_EVIDENCE)

    return gaps


# =============================================================================
# Bulk pre-aggregation
# =============================================================================


def build_health_inputs(
    issues: Iterable[Issue],
    evidence: Iterable[EvidenceRecord],
    comms: Iterable[CommsRecord],
) -> List[IssueHealthInput]:
    """
    Pre-aggregate raw rows into Case Health inputs, one per issue.

    Last-evidence time uses ``uploaded_at`` when present (upload is the
    tenant's activity), falling back to ``occurred_at``.
    """
    evidence_count: dict = {}
    last_evidence: dict = {}
    for e in evidence:
        if e.issue_id is None:
            continue
        evidence_count[e.issue_id] = evidence_count.get(e.issue_id, 0) + 1
        stamp = e.uploaded_at or e.occurred_at
        last_evidence[e.issue_id] = latest(last_evidence.get(e.issue_id), stamp)

    comms_count: dict = {}
    last_comms: dict = {}
    for c in comms:
        if c.issue_id is None:
            continue
        comms_count[c.issue_id] = comms_count.get(c.issue_id, 0) + 1
        last_comms[c.issue_id] = latest(last_comms.get(c.issue_id), c.occurred_at)

    inputs = [
        IssueHealthInput(
            issue=issue,
            evidence_count=evidence_count.get(issue.id, 0),
            comms_count=comms_count.get(issue.id, 0),
            last_evidence_at=last_evidence.get(issue.id),
            last_comms_at=last_comms.get(issue.id),
        )
        for issue in issues
    ]
    logger.debug(f"Built {len(inputs)} health inputs")
    return inputs
