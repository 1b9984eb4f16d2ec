"""Override audit trail.

When a user proceeds past a warned or soft-blocked decision the action is
recorded as an OverrideLogEntry. Entries are append-only: sinks expose
``write`` and ``history`` and nothing that mutates or deletes.

Persistence is pluggable through OverrideLogSink:
- InMemoryOverrideLog: process-local sink (tests, single-process tools)
- clients.OverrideLogClient: HTTP sink backed by the audit service

OverrideRecorder builds entries from enforcement results and writes them
with retry. An audit write that still fails is logged and reported as
False; it never blocks the user's action.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, runtime_checkable

from tb_core_lib.config.settings import get_settings
from tb_core_lib.models.enforcement import EnforcementResult, OverrideLogEntry
from tb_core_lib.utils.resilience import create_custom_retry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


@runtime_checkable
class OverrideLogSink(Protocol):
    """Append-only storage for override entries"""

    async def write(self, entry: OverrideLogEntry) -> None:
        ...

    async def history(self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OverrideLogEntry]:
        ...


class InMemoryOverrideLog:
    """Process-local append-only override log."""

    def __init__(self):
        self._entries: List[OverrideLogEntry] = []
        self._ids: Dict[str, OverrideLogEntry] = {}
        self._lock: Optional[asyncio.Lock] = None

    async def write(self, entry: OverrideLogEntry) -> None:
        # Created on first use so it belongs to the running event loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if entry.id in self._ids:
                raise ValueError(f"Override entry {entry.id} already recorded")
            self._entries.append(entry)
            self._ids[entry.id] = entry

    async def history(self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OverrideLogEntry]:
        """A user's entries, newest first."""
        if limit < 1:
            return []
        mine = [e for e in self._entries if e.user_id == user_id]
        # Stable sort keeps insertion order for equal timestamps; reverse it
        mine = list(reversed(mine))
        mine.sort(key=lambda e: e.created_at, reverse=True)
        return mine[:limit]

    def __len__(self) -> int:
        return len(self._entries)


class OverrideRecorder:
    """Records overrides of enforcement decisions to a sink.

    Usage:
        recorder = OverrideRecorder(sink=InMemoryOverrideLog())
        result = check_enforcement("close_issue", "adequate", 65, "free")
        ok = await recorder.record_override("user-1", result, issue_id="issue-1")
    """

    def __init__(
        self,
        sink: OverrideLogSink,
        max_attempts: Optional[int] = None,
        min_wait: float = 0.5,
        max_wait: float = 4,
    ):
        """Initialize recorder.

        Args:
            sink: Where entries are written
            max_attempts: Attempts per write (default: OVERRIDE_LOG_MAX_ATTEMPTS setting)
            min_wait: Minimum backoff between attempts (seconds)
            max_wait: Maximum backoff between attempts (seconds)
        """
        self.sink = sink
        self.max_attempts = max_attempts or get_settings().override_log_max_attempts
        retry_policy = create_custom_retry(
            max_attempts=self.max_attempts,
            min_wait=min_wait,
            max_wait=max_wait,
            multiplier=min_wait,
        )
        self._write_with_retry = retry_policy(self._write)

    async def _write(self, entry: OverrideLogEntry) -> None:
        await self.sink.write(entry)

    def build_entry(
        self,
        user_id: str,
        result: EnforcementResult,
        issue_id: Optional[str] = None,
        evidence_id: Optional[str] = None,
        comms_id: Optional[str] = None,
        pack_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> OverrideLogEntry:
        """
        Snapshot an enforcement decision as an override entry.

        Raises:
            ValueError: If the decision is allowed (nothing to override) or
                hard-blocked (cannot be overridden)
        """
        if not result.level.is_overridable:
            raise ValueError(
                f"Cannot record an override of a '{result.level.value}' decision; "
                "only warned or soft-blocked actions can be overridden"
            )

        context = result.context
        return OverrideLogEntry(
            user_id=user_id,
            action=context.action,
            enforcement_level=result.level,
            health_status=context.health_status,
            health_score=round(context.health_score),
            issue_id=issue_id,
            evidence_id=evidence_id,
            comms_id=comms_id,
            pack_id=pack_id,
            reason=reason or None,
            plan_id=context.plan_id,
            plan_mode=context.plan_mode,
        )

    async def record_override(
        self,
        user_id: str,
        result: EnforcementResult,
        issue_id: Optional[str] = None,
        evidence_id: Optional[str] = None,
        comms_id: Optional[str] = None,
        pack_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Record that ``user_id`` proceeded despite ``result``.

        Returns:
            True when the entry was written, False when every attempt failed

        Raises:
            ValueError: If the decision is not overridable
        """
        entry = self.build_entry(
            user_id,
            result,
            issue_id=issue_id,
            evidence_id=evidence_id,
            comms_id=comms_id,
            pack_id=pack_id,
            reason=reason,
        )

        try:
            await self._write_with_retry(entry)
        except Exception as e:
            logger.error(
                f"Failed to record override {entry.id} ({entry.action.value}) for user {user_id} "
                f"after {self.max_attempts} attempts: {e}"
            )
            return False

        logger.info(
            f"Recorded override {entry.id}: {entry.action.value} past "
            f"{entry.enforcement_level.value} (health={entry.health_score})"
        )
        return True

    async def history(self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OverrideLogEntry]:
        """A user's past overrides, newest first."""
        return await self.sink.history(user_id, limit=limit)
