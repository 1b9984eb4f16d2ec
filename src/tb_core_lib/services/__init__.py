"""Services composing the scoring core"""

from tb_core_lib.services.enforcement_service import (
    EnforcementCheck,
    can_close_issue,
    can_delete_comms,
    can_delete_evidence,
    can_generate_pack,
    check_enforcement_for_case,
    check_enforcement_for_issue,
)

__all__ = [
    "EnforcementCheck",
    "can_close_issue",
    "can_delete_comms",
    "can_delete_evidence",
    "can_generate_pack",
    "check_enforcement_for_case",
    "check_enforcement_for_issue",
]
