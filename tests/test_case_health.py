"""Tests for the Case Health scorer."""

import pytest
from pydantic import ValidationError

from conftest import NOW, days_ago, make_input
from tb_core_lib.core.case_health import (
    FACTOR_COMMUNICATION,
    FACTOR_DOCUMENTATION,
    FACTOR_EVIDENCE,
    FACTOR_RECENCY,
    FACTOR_SEVERITY,
    get_status_from_score,
    score_issue,
    score_overall,
)
from tb_core_lib.models import CaseHealthStatus, FactorStatus


class TestStatusBands:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, CaseHealthStatus.STRONG),
            (80, CaseHealthStatus.STRONG),
            (79, CaseHealthStatus.ADEQUATE),
            (60, CaseHealthStatus.ADEQUATE),
            (59, CaseHealthStatus.WEAK),
            (40, CaseHealthStatus.WEAK),
            (39, CaseHealthStatus.AT_RISK),
            (0, CaseHealthStatus.AT_RISK),
        ],
    )
    def test_thresholds(self, score, expected):
        assert get_status_from_score(score) == expected


class TestScoreIssue:
    def test_fully_documented_issue_scores_100(self, strong_input):
        health = score_issue(strong_input, now=NOW)
        assert health.score == 100
        assert health.status == CaseHealthStatus.STRONG
        assert health.status_label == "Strong"
        assert all(f.status == FactorStatus.GOOD for f in health.factors)

    def test_factors_in_fixed_order(self, strong_input):
        health = score_issue(strong_input, now=NOW)
        assert [f.name for f in health.factors] == [
            FACTOR_DOCUMENTATION,
            FACTOR_EVIDENCE,
            FACTOR_COMMUNICATION,
            FACTOR_RECENCY,
            FACTOR_SEVERITY,
        ]

    def test_bare_urgent_issue(self, bare_urgent_input):
        health = score_issue(bare_urgent_input, now=NOW)
        # doc 5 + evidence 0 + comms 0 + recency 15 + severity 15
        assert health.score == 35
        assert health.status == CaseHealthStatus.AT_RISK
        assert health.factor(FACTOR_EVIDENCE).status == FactorStatus.CRITICAL
        assert health.factor(FACTOR_COMMUNICATION).status == FactorStatus.CRITICAL

    @pytest.mark.parametrize(
        "count,points,status",
        [
            (0, 0, FactorStatus.CRITICAL),
            (1, 10, FactorStatus.WARNING),
            (2, 18, FactorStatus.WARNING),
            (3, 25, FactorStatus.GOOD),
            (4, 25, FactorStatus.GOOD),
            (5, 30, FactorStatus.GOOD),
            (12, 30, FactorStatus.GOOD),
        ],
    )
    def test_evidence_factor(self, count, points, status):
        factor = score_issue(make_input(evidence_count=count), now=NOW).factor(FACTOR_EVIDENCE)
        assert factor.score == points
        assert factor.status == status

    @pytest.mark.parametrize(
        "count,points,status",
        [
            (0, 0, FactorStatus.CRITICAL),
            (1, 12, FactorStatus.WARNING),
            (2, 20, FactorStatus.GOOD),
            (3, 20, FactorStatus.GOOD),
            (4, 25, FactorStatus.GOOD),
        ],
    )
    def test_communication_factor(self, count, points, status):
        factor = score_issue(make_input(comms_count=count), now=NOW).factor(FACTOR_COMMUNICATION)
        assert factor.score == points
        assert factor.status == status

    @pytest.mark.parametrize(
        "idle_days,points,status",
        [
            (0, 15, FactorStatus.GOOD),
            (3, 15, FactorStatus.GOOD),
            (4, 12, FactorStatus.GOOD),
            (7, 12, FactorStatus.GOOD),
            (8, 8, FactorStatus.WARNING),
            (14, 8, FactorStatus.WARNING),
            (15, 3, FactorStatus.CRITICAL),
        ],
    )
    def test_recency_factor(self, idle_days, points, status):
        data = make_input(updated_days_ago=idle_days, created_days_ago=idle_days + 1)
        factor = score_issue(data, now=NOW).factor(FACTOR_RECENCY)
        assert factor.score == points
        assert factor.status == status

    def test_recency_warning_mentions_idle_days(self):
        data = make_input(updated_days_ago=10, created_days_ago=20)
        factor = score_issue(data, now=NOW).factor(FACTOR_RECENCY)
        assert factor.recommendation == (
            "No activity in 10 days - add updates to show ongoing effort"
        )

    def test_partial_days_are_floored(self):
        data = make_input(updated_days_ago=3.9, created_days_ago=5)
        assert score_issue(data, now=NOW).factor(FACTOR_RECENCY).score == 15

    def test_recency_uses_most_recent_activity(self):
        data = make_input(
            updated_days_ago=30,
            created_days_ago=40,
            last_evidence_at=days_ago(20),
            last_comms_at=days_ago(1),
        )
        assert score_issue(data, now=NOW).factor(FACTOR_RECENCY).score == 15

    @pytest.mark.parametrize(
        "description,points",
        [
            (None, 5),
            ("", 5),
            ("x" * 20, 5),
            ("x" * 21, 15),
        ],
    )
    def test_documentation_needs_more_than_20_characters(self, description, points):
        data = make_input(description=description)
        assert score_issue(data, now=NOW).factor(FACTOR_DOCUMENTATION).score == points

    @pytest.mark.parametrize(
        "severity,points",
        [
            (None, 10),
            ("Low", 10),
            ("Medium", 15),
            ("High", 15),
            ("Urgent", 15),
        ],
    )
    def test_severity_factor(self, severity, points):
        data = make_input(severity=severity)
        assert score_issue(data, now=NOW).factor(FACTOR_SEVERITY).score == points

    def test_more_evidence_never_lowers_score(self):
        scores = [
            score_issue(make_input(evidence_count=n, comms_count=1, severity="Low"), now=NOW).score
            for n in range(0, 8)
        ]
        assert scores == sorted(scores)

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            make_input(evidence_count=-1)

    def test_boolean_counts_rejected(self):
        with pytest.raises(ValidationError):
            make_input(comms_count=True)


class TestScoreOverall:
    def test_empty_case_is_strong(self):
        health = score_overall([], now=NOW)
        assert health.score == 100
        assert health.status == CaseHealthStatus.STRONG
        assert health.status_label == "No Active Issues"
        assert health.factors == []

    def test_only_resolved_issues_is_strong(self):
        items = [
            make_input(issue_id="a", status="resolved", evidence_count=0),
            make_input(issue_id="b", status="closed", comms_count=0),
        ]
        health = score_overall(items, now=NOW)
        assert health.score == 100
        assert health.status == CaseHealthStatus.STRONG

    def test_weakest_link(self, strong_input):
        weak = make_input(issue_id="weak", evidence_count=1, comms_count=0, severity="Low")
        health = score_overall([strong_input, weak], now=NOW)
        expected = min(
            score_issue(strong_input, now=NOW).score,
            score_issue(weak, now=NOW).score,
        )
        assert health.score == expected
        assert health.status == get_status_from_score(expected)

    def test_inactive_issue_ignored_in_minimum(self, strong_input):
        resolved = make_input(issue_id="done", status="resolved", evidence_count=0, comms_count=0)
        assert score_overall([strong_input, resolved], now=NOW).score == 100

    def test_factors_deduplicated_keeping_worst(self):
        a = make_input(issue_id="a", evidence_count=1, comms_count=4)
        b = make_input(issue_id="b", evidence_count=0, comms_count=4)
        health = score_overall([a, b], now=NOW)
        names = [f.name for f in health.factors]
        assert names.count(FACTOR_EVIDENCE) == 1
        assert health.factor(FACTOR_EVIDENCE).status == FactorStatus.CRITICAL

    def test_at_most_three_factors_critical_first(self):
        items = [
            make_input(
                issue_id="a",
                evidence_count=0,
                comms_count=0,
                description="",
                severity=None,
                updated_days_ago=30,
                created_days_ago=40,
            )
        ]
        health = score_overall(items, now=NOW)
        assert len(health.factors) == 3
        assert all(f.status == FactorStatus.CRITICAL for f in health.factors)

    def test_good_factors_excluded(self, strong_input):
        weak = make_input(issue_id="weak", comms_count=1)
        health = score_overall([strong_input, weak], now=NOW)
        assert [f.name for f in health.factors] == [FACTOR_COMMUNICATION]
