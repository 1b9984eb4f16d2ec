"""Tests for the override audit trail."""

import asyncio
from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW
from tb_core_lib.audit import InMemoryOverrideLog, OverrideLogSink, OverrideRecorder
from tb_core_lib.core.enforcement import check_enforcement
from tb_core_lib.models import EnforcementLevel, OverrideLogEntry, PlanId, PlanMode


class FlakySink(InMemoryOverrideLog):
    """Fails the first ``failures`` writes."""

    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def write(self, entry):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ConnectionError("audit store unavailable")
        await super().write(entry)


def fast_recorder(sink, max_attempts=3):
    return OverrideRecorder(sink=sink, max_attempts=max_attempts, min_wait=0, max_wait=0)


def make_entry(user_id="user-1", offset_minutes=0, **overrides):
    fields = dict(
        user_id=user_id,
        action="close_issue",
        enforcement_level="warned",
        health_status="adequate",
        health_score=65,
        plan_id="free",
        plan_mode="guided",
        created_at=NOW + timedelta(minutes=offset_minutes),
    )
    fields.update(overrides)
    return OverrideLogEntry(**fields)


class TestOverrideLogEntry:
    @pytest.mark.parametrize("level", ["allowed", "hard-blocked"])
    def test_only_overridable_levels(self, level):
        with pytest.raises(ValidationError):
            make_entry(enforcement_level=level)

    def test_plan_mode_must_match_plan(self):
        with pytest.raises(ValidationError):
            make_entry(plan_id="pro", plan_mode="guided")

    def test_entries_are_immutable(self):
        entry = make_entry()
        with pytest.raises(ValidationError):
            entry.reason = "changed my mind"

    def test_reason_length_limited(self):
        with pytest.raises(ValidationError):
            make_entry(reason="x" * 1001)


class TestInMemoryOverrideLog:
    def test_implements_sink(self):
        assert isinstance(InMemoryOverrideLog(), OverrideLogSink)

    @pytest.mark.asyncio
    async def test_history_newest_first_and_limited(self):
        log = InMemoryOverrideLog()
        for minute in range(12):
            await log.write(make_entry(offset_minutes=minute))
        await log.write(make_entry(user_id="someone-else", offset_minutes=99))

        history = await log.history("user-1")
        assert len(history) == 10
        assert history[0].created_at == NOW + timedelta(minutes=11)
        assert all(e.user_id == "user-1" for e in history)
        assert len(await log.history("user-1", limit=3)) == 3

    def test_usable_across_event_loops(self):
        log = InMemoryOverrideLog()
        asyncio.run(log.write(make_entry(offset_minutes=1)))
        asyncio.run(log.write(make_entry(offset_minutes=2)))
        assert len(asyncio.run(log.history("user-1"))) == 2

    @pytest.mark.asyncio
    async def test_duplicate_ids_rejected(self):
        log = InMemoryOverrideLog()
        entry = make_entry()
        await log.write(entry)
        with pytest.raises(ValueError):
            await log.write(entry)
        assert len(log) == 1


class TestOverrideRecorder:
    @pytest.mark.asyncio
    async def test_records_soft_blocked_override(self):
        log = InMemoryOverrideLog()
        result = check_enforcement("close_issue", "weak", 52.6, "plus")

        ok = await fast_recorder(log).record_override(
            "user-1", result, issue_id="issue-1", reason="Landlord already fixed it"
        )

        assert ok is True
        [entry] = await log.history("user-1")
        assert entry.enforcement_level == EnforcementLevel.SOFT_BLOCKED
        assert entry.health_score == 53
        assert entry.issue_id == "issue-1"
        assert entry.plan_id == PlanId.PLUS
        assert entry.plan_mode == PlanMode.GUIDED
        assert entry.reason == "Landlord already fixed it"

    @pytest.mark.asyncio
    async def test_records_advisor_warning(self):
        log = InMemoryOverrideLog()
        result = check_enforcement("delete_evidence", "adequate", 70, "pro")
        assert await fast_recorder(log).record_override("user-1", result, evidence_id="ev-9")
        [entry] = await log.history("user-1")
        assert entry.enforcement_level == EnforcementLevel.WARNED
        assert entry.plan_mode == PlanMode.ADVISOR
        assert entry.evidence_id == "ev-9"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action,status,plan",
        [
            ("generate_pack", "strong", "free"),
            ("generate_pack", "at-risk", "free"),
        ],
    )
    async def test_rejects_non_overridable_decisions(self, action, status, plan):
        log = InMemoryOverrideLog()
        result = check_enforcement(action, status, 50, plan)
        with pytest.raises(ValueError):
            await fast_recorder(log).record_override("user-1", result)
        assert len(log) == 0

    @pytest.mark.asyncio
    async def test_retries_transient_failures(self):
        sink = FlakySink(failures=2)
        result = check_enforcement("close_issue", "adequate", 65, "free")
        assert await fast_recorder(sink).record_override("user-1", result) is True
        assert sink.attempts == 3
        assert len(sink) == 1

    @pytest.mark.asyncio
    async def test_reports_failure_without_raising(self, caplog):
        sink = FlakySink(failures=10)
        result = check_enforcement("close_issue", "adequate", 65, "free")
        assert await fast_recorder(sink, max_attempts=2).record_override("user-1", result) is False
        assert sink.attempts == 2
        assert "Failed to record override" in caplog.text

    @pytest.mark.asyncio
    async def test_attempt_budget_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("OVERRIDE_LOG_MAX_ATTEMPTS", "4")
        sink = FlakySink(failures=10)
        recorder = OverrideRecorder(sink=sink, min_wait=0, max_wait=0)
        result = check_enforcement("close_issue", "adequate", 65, "free")

        assert recorder.max_attempts == 4
        assert await recorder.record_override("user-1", result) is False
        assert sink.attempts == 4

    @pytest.mark.asyncio
    async def test_history_delegates_to_sink(self):
        log = InMemoryOverrideLog()
        recorder = fast_recorder(log)
        result = check_enforcement("archive_issue", "weak", 45, "free")
        await recorder.record_override("user-1", result, issue_id="a")
        await recorder.record_override("user-1", result, issue_id="b")
        history = await recorder.history("user-1", limit=1)
        assert len(history) == 1
