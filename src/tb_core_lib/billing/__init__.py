"""Plan entitlements and plan resolution"""

from tb_core_lib.billing.plans import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    OWNER_ENTITLEMENTS,
    PLAN_DEFINITIONS,
    UNLIMITED,
    LimitCheck,
    PlanEntitlements,
    PlanFeatures,
    PlanId,
    PlanLimits,
    SubscriptionRecord,
    check_limit,
    format_limit,
    has_feature,
    is_unlimited,
    make_owner_predicate,
    plan_from_price_id,
    resolve_plan,
)

__all__ = [
    "ACTIVE_SUBSCRIPTION_STATUSES",
    "OWNER_ENTITLEMENTS",
    "PLAN_DEFINITIONS",
    "UNLIMITED",
    "LimitCheck",
    "PlanEntitlements",
    "PlanFeatures",
    "PlanId",
    "PlanLimits",
    "SubscriptionRecord",
    "check_limit",
    "format_limit",
    "has_feature",
    "is_unlimited",
    "make_owner_predicate",
    "plan_from_price_id",
    "resolve_plan",
]
