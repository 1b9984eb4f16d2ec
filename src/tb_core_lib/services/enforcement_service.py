"""Enforcement checks against live Case Health.

Glue between the Case Health scorer and the enforcement matrix: callers
hand over pre-aggregated issue inputs and the user's plan, and get back
the decision together with the health that produced it.

Issue-scoped actions (close, resolve, delete evidence/comms, archive) are
judged on the target issue's own health. Pack generation is judged on the
overall (weakest-link) case health.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel

from tb_core_lib.core.case_health import score_issue, score_overall
from tb_core_lib.core.enforcement import check_enforcement
from tb_core_lib.models.enforcement import EnforcementAction, EnforcementResult, PlanId
from tb_core_lib.models.health import CaseHealth
from tb_core_lib.models.issue import IssueHealthInput

logger = logging.getLogger(__name__)


class EnforcementCheck(BaseModel):
    """Enforcement decision plus the Case Health it was based on"""

    result: EnforcementResult
    health: CaseHealth
    issue_id: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.result.allowed

    @property
    def requires_confirmation(self) -> bool:
        return self.result.requires_confirmation

    class Config:
        frozen = True


def check_enforcement_for_issue(
    data: IssueHealthInput,
    action: EnforcementAction,
    plan_id: PlanId,
    now: Optional[datetime] = None,
) -> EnforcementCheck:
    """Check an action targeting one issue against that issue's health."""
    health = score_issue(data, now=now)
    result = check_enforcement(action, health.status, health.score, plan_id)

    logger.info(
        f"Enforcement for issue {data.issue.id}: {result.context.action.value} "
        f"-> {result.level.value} (health={health.score})"
    )
    return EnforcementCheck(result=result, health=health, issue_id=data.issue.id)


def check_enforcement_for_case(
    items: Iterable[IssueHealthInput],
    action: EnforcementAction,
    plan_id: PlanId,
    now: Optional[datetime] = None,
) -> EnforcementCheck:
    """
    Check an action against overall case health.

    A case with no open or in-progress issues is evaluated as strong/100.
    """
    health = score_overall(items, now=now)
    result = check_enforcement(action, health.status, health.score, plan_id)

    logger.info(
        f"Enforcement for case: {result.context.action.value} "
        f"-> {result.level.value} (health={health.score})"
    )
    return EnforcementCheck(result=result, health=health)


# ============================================================================
# QUICK CHECKS
# ============================================================================


def can_close_issue(
    data: IssueHealthInput, plan_id: PlanId, now: Optional[datetime] = None
) -> EnforcementCheck:
    return check_enforcement_for_issue(data, EnforcementAction.CLOSE_ISSUE, plan_id, now=now)


def can_delete_evidence(
    data: IssueHealthInput, plan_id: PlanId, now: Optional[datetime] = None
) -> EnforcementCheck:
    return check_enforcement_for_issue(data, EnforcementAction.DELETE_EVIDENCE, plan_id, now=now)


def can_delete_comms(
    data: IssueHealthInput, plan_id: PlanId, now: Optional[datetime] = None
) -> EnforcementCheck:
    return check_enforcement_for_issue(data, EnforcementAction.DELETE_COMMS, plan_id, now=now)


def can_generate_pack(
    items: Iterable[IssueHealthInput], plan_id: PlanId, now: Optional[datetime] = None
) -> EnforcementCheck:
    """Pack generation uses overall case health."""
    return check_enforcement_for_case(items, EnforcementAction.GENERATE_PACK, plan_id, now=now)
