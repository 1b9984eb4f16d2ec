"""Shared test fixtures for the tb_core_lib test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from tb_core_lib.config import reset_settings
from tb_core_lib.models import (
    CommsRecord,
    EvidenceRecord,
    Issue,
    IssueForPack,
    IssueHealthInput,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

LONG_DESCRIPTION = "Water is leaking through the bathroom ceiling onto the floor."


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def make_issue(
    issue_id="issue-1",
    title="Leaking bathroom ceiling",
    description=LONG_DESCRIPTION,
    status="open",
    severity="High",
    created_days_ago=2,
    updated_days_ago=0,
    cls=Issue,
    **extra,
):
    return cls(
        id=issue_id,
        title=title,
        description=description,
        status=status,
        severity=severity,
        created_at=days_ago(created_days_ago),
        updated_at=days_ago(updated_days_ago),
        **extra,
    )


def make_input(evidence_count=5, comms_count=4, last_evidence_at=None, last_comms_at=None, **issue_kwargs):
    return IssueHealthInput(
        issue=make_issue(**issue_kwargs),
        evidence_count=evidence_count,
        comms_count=comms_count,
        last_evidence_at=last_evidence_at,
        last_comms_at=last_comms_at,
    )


def make_evidence(evidence_id, issue_id="issue-1", type="photo", occurred_days_ago=1, uploaded_days_ago=None):
    return EvidenceRecord(
        id=evidence_id,
        issue_id=issue_id,
        type=type,
        occurred_at=days_ago(occurred_days_ago),
        uploaded_at=days_ago(uploaded_days_ago) if uploaded_days_ago is not None else None,
    )


def make_comms(issue_id="issue-1", direction=None, occurred_days_ago=1, comms_id=None):
    return CommsRecord(
        id=comms_id,
        issue_id=issue_id,
        direction=direction,
        occurred_at=days_ago(occurred_days_ago),
    )


def make_pack_issue(issue_id, evidence=0, **issue_kwargs):
    items = [make_evidence(f"{issue_id}-ev-{n}", issue_id=issue_id) for n in range(evidence)]
    return make_issue(issue_id=issue_id, cls=IssueForPack, evidence_items=items, **issue_kwargs)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def strong_input():
    """Fully documented High issue with activity today."""
    return make_input()


@pytest.fixture
def bare_urgent_input():
    """Urgent issue with nothing attached, updated today."""
    return make_input(evidence_count=0, comms_count=0, severity="Urgent", description="")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Each test sees a fresh settings singleton and no ambient env config."""
    for key in (
        "APP_OWNER_EMAIL",
        "STRIPE_PRICE_PLUS_MONTHLY",
        "STRIPE_PRICE_PRO_MONTHLY",
        "STRIPE_PRICE_PLUS_YEARLY",
        "STRIPE_PRICE_PRO_YEARLY",
        "OVERRIDE_LOG_URL",
        "OVERRIDE_LOG_TIMEOUT",
        "OVERRIDE_LOG_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()
