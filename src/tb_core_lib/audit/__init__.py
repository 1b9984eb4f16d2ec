"""Override audit trail"""

from tb_core_lib.audit.override_log import (
    DEFAULT_HISTORY_LIMIT,
    InMemoryOverrideLog,
    OverrideLogSink,
    OverrideRecorder,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "InMemoryOverrideLog",
    "OverrideLogSink",
    "OverrideRecorder",
]
