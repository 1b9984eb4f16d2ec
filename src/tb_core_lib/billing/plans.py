"""Plan definitions and plan resolution.

PLAN_DEFINITIONS is the single source of truth for limits and features.
``resolve_plan`` turns a user's email and subscription record into
entitlements; the privileged-user check is injected as a predicate so the
resolver never reads the environment itself.

Resolution order:
1. Privileged user -> owner entitlements (Pro, everything unlimited)
2. Active/trialing subscription -> plan from the subscription's price id
3. Otherwise -> Free
"""

import logging
from typing import Callable, Dict, Optional

from pydantic import BaseModel, Field

from tb_core_lib.models.enforcement import PlanId, PlanMode, plan_mode_for

logger = logging.getLogger(__name__)

# Largest integer a JSON consumer can represent exactly
UNLIMITED = 2 ** 53 - 1

ACTIVE_SUBSCRIPTION_STATUSES = ["active", "trialing"]

PrivilegedUserPredicate = Callable[[Optional[str]], bool]


# ============================================================
# Entitlement Models
# ============================================================

class PlanLimits(BaseModel):
    properties: int
    issues: int
    evidence_files: int
    evidence_packs_per_month: int
    max_file_size_mb: int
    storage_mb: int

    class Config:
        frozen = True


class PlanFeatures(BaseModel):
    bulk_uploads: bool = False
    evidence_tagging: bool = False
    custom_pack_titles: bool = False
    cover_page_and_index: bool = False
    unlimited_downloads: bool = False
    priority_support: bool = False
    advanced_pack_layouts: bool = False
    sectioned_packs: bool = False
    pack_version_history: bool = False
    early_access: bool = False

    class Config:
        frozen = True


class PlanEntitlements(BaseModel):
    """What a user may do under their resolved plan"""

    plan_id: PlanId
    plan_name: str
    is_owner: bool = False
    limits: PlanLimits
    features: PlanFeatures

    @property
    def plan_mode(self) -> PlanMode:
        return plan_mode_for(self.plan_id)

    class Config:
        frozen = True


class SubscriptionRecord(BaseModel):
    """Subscription row as synced from the payment provider"""

    user_id: Optional[str] = None
    price_id: Optional[str] = None
    status: Optional[str] = None
    current_period_end: Optional[str] = None
    cancel_at_period_end: Optional[bool] = None

    @property
    def is_active(self) -> bool:
        return (self.status or "") in ACTIVE_SUBSCRIPTION_STATUSES


class LimitCheck(BaseModel):
    """Outcome of checking current usage against a plan limit"""

    allowed: bool
    limit: int
    usage: int
    plan_id: PlanId

    class Config:
        frozen = True


# ============================================================
# Plan Definitions
# ============================================================

_ALL_FEATURES = PlanFeatures(**{name: True for name in PlanFeatures.model_fields})

PLAN_DEFINITIONS: Dict[PlanId, PlanEntitlements] = {
    PlanId.FREE: PlanEntitlements(
        plan_id=PlanId.FREE,
        plan_name="Free",
        limits=PlanLimits(
            properties=1,
            issues=3,
            evidence_files=10,
            evidence_packs_per_month=1,
            max_file_size_mb=10,
            storage_mb=100,
        ),
        features=PlanFeatures(),
    ),
    PlanId.PLUS: PlanEntitlements(
        plan_id=PlanId.PLUS,
        plan_name="Plus",
        limits=PlanLimits(
            properties=3,
            issues=20,
            evidence_files=200,
            evidence_packs_per_month=10,
            max_file_size_mb=25,
            storage_mb=5 * 1024,
        ),
        features=PlanFeatures(
            bulk_uploads=True,
            evidence_tagging=True,
            custom_pack_titles=True,
            cover_page_and_index=True,
            unlimited_downloads=True,
            priority_support=True,
        ),
    ),
    PlanId.PRO: PlanEntitlements(
        plan_id=PlanId.PRO,
        plan_name="Pro",
        limits=PlanLimits(
            properties=UNLIMITED,
            issues=UNLIMITED,
            evidence_files=UNLIMITED,
            evidence_packs_per_month=UNLIMITED,
            max_file_size_mb=50,
            storage_mb=25 * 1024,
        ),
        features=_ALL_FEATURES,
    ),
}

# Owner gets Pro with everything unlimited except file size
OWNER_ENTITLEMENTS = PlanEntitlements(
    plan_id=PlanId.PRO,
    plan_name="Pro (Owner)",
    is_owner=True,
    limits=PlanLimits(
        properties=UNLIMITED,
        issues=UNLIMITED,
        evidence_files=UNLIMITED,
        evidence_packs_per_month=UNLIMITED,
        max_file_size_mb=100,
        storage_mb=UNLIMITED,
    ),
    features=_ALL_FEATURES,
)


# ============================================================
# Resolution
# ============================================================

def plan_from_price_id(price_id: Optional[str], price_map: Dict[str, PlanId]) -> PlanId:
    """Map a payment-provider price id to a plan; unknown or missing ids are Free."""
    if not price_id:
        return PlanId.FREE
    return PlanId(price_map.get(price_id, PlanId.FREE))


def make_owner_predicate(owner_email: Optional[str]) -> PrivilegedUserPredicate:
    """
    Build an ``is_privileged_user`` predicate for a configured owner email.

    Comparison is trimmed and case-insensitive; an empty owner email never
    matches anyone.
    """
    owner = (owner_email or "").strip().lower()

    def is_privileged_user(email: Optional[str]) -> bool:
        if not email or not owner:
            return False
        return email.strip().lower() == owner

    return is_privileged_user


def resolve_plan(
    user_email: Optional[str],
    subscription: Optional[SubscriptionRecord],
    is_privileged_user: PrivilegedUserPredicate,
    price_map: Dict[str, PlanId],
) -> PlanEntitlements:
    """
    Resolve a user's entitlements.

    Args:
        user_email: Authenticated user's email, if known
        subscription: The user's subscription record, if any
        is_privileged_user: Predicate deciding owner access
        price_map: Price id -> plan mapping

    Returns:
        PlanEntitlements (owner entitlements, paid plan, or Free)
    """
    if is_privileged_user(user_email):
        logger.debug("Privileged user resolved to owner entitlements")
        return OWNER_ENTITLEMENTS

    if subscription is None or not subscription.is_active:
        return PLAN_DEFINITIONS[PlanId.FREE]

    plan_id = plan_from_price_id(subscription.price_id, price_map)
    if plan_id == PlanId.FREE and subscription.price_id:
        logger.warning(f"Unknown price id '{subscription.price_id}' on active subscription")
    return PLAN_DEFINITIONS[plan_id]


def is_unlimited(value: int) -> bool:
    return value >= UNLIMITED


def format_limit(value: int) -> str:
    """Display form of a limit: 'Unlimited' or a comma-grouped number."""
    if is_unlimited(value):
        return "Unlimited"
    return f"{value:,}"


def check_limit(entitlements: PlanEntitlements, limit_name: str, current_usage: int) -> LimitCheck:
    """
    Check whether one more item fits under a plan limit.

    Args:
        entitlements: The user's resolved entitlements
        limit_name: A PlanLimits field, e.g. "issues" or "evidence_files"
        current_usage: Items already in use

    Returns:
        LimitCheck; ``allowed`` is True while usage is below the limit

    Raises:
        ValueError: If ``limit_name`` is not a plan limit
    """
    if limit_name not in PlanLimits.model_fields:
        raise ValueError(f"Unknown plan limit '{limit_name}'")
    limit = getattr(entitlements.limits, limit_name)
    return LimitCheck(
        allowed=current_usage < limit,
        limit=limit,
        usage=current_usage,
        plan_id=entitlements.plan_id,
    )


def has_feature(entitlements: PlanEntitlements, feature: str) -> bool:
    """Whether the plan includes ``feature`` (a PlanFeatures field)."""
    if feature not in PlanFeatures.model_fields:
        raise ValueError(f"Unknown plan feature '{feature}'")
    return getattr(entitlements.features, feature)
