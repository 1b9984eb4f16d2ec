"""Tests for plan definitions and plan resolution."""

import pytest

from tb_core_lib.billing import (
    OWNER_ENTITLEMENTS,
    PLAN_DEFINITIONS,
    UNLIMITED,
    PlanId,
    SubscriptionRecord,
    check_limit,
    format_limit,
    has_feature,
    is_unlimited,
    make_owner_predicate,
    plan_from_price_id,
    resolve_plan,
)
from tb_core_lib.models import PlanMode

PRICE_MAP = {
    "price_plus_monthly": PlanId.PLUS,
    "price_pro_yearly": PlanId.PRO,
}


def nobody_privileged(email):
    return False


class TestDefinitions:
    def test_free_limits(self):
        free = PLAN_DEFINITIONS[PlanId.FREE]
        assert free.limits.issues == 3
        assert free.limits.evidence_packs_per_month == 1
        assert not free.features.bulk_uploads

    def test_pro_is_unlimited_and_advisor(self):
        pro = PLAN_DEFINITIONS[PlanId.PRO]
        assert is_unlimited(pro.limits.issues)
        assert pro.features.sectioned_packs
        assert pro.plan_mode == PlanMode.ADVISOR

    def test_plus_is_guided(self):
        assert PLAN_DEFINITIONS[PlanId.PLUS].plan_mode == PlanMode.GUIDED

    def test_owner_entitlements(self):
        assert OWNER_ENTITLEMENTS.is_owner
        assert OWNER_ENTITLEMENTS.plan_id == PlanId.PRO
        assert OWNER_ENTITLEMENTS.limits.max_file_size_mb == 100
        assert is_unlimited(OWNER_ENTITLEMENTS.limits.storage_mb)


class TestPriceMapping:
    @pytest.mark.parametrize(
        "price_id,expected",
        [
            ("price_plus_monthly", PlanId.PLUS),
            ("price_pro_yearly", PlanId.PRO),
            ("price_unknown", PlanId.FREE),
            (None, PlanId.FREE),
            ("", PlanId.FREE),
        ],
    )
    def test_plan_from_price_id(self, price_id, expected):
        assert plan_from_price_id(price_id, PRICE_MAP) == expected


class TestResolvePlan:
    def test_privileged_user_gets_owner_entitlements(self):
        is_owner = make_owner_predicate("Owner@Example.com ")
        plan = resolve_plan(" owner@example.COM", None, is_owner, PRICE_MAP)
        assert plan == OWNER_ENTITLEMENTS

    @pytest.mark.parametrize("status", ["active", "trialing"])
    def test_active_subscription_uses_price(self, status):
        subscription = SubscriptionRecord(price_id="price_pro_yearly", status=status)
        plan = resolve_plan("user@example.com", subscription, nobody_privileged, PRICE_MAP)
        assert plan.plan_id == PlanId.PRO
        assert not plan.is_owner

    @pytest.mark.parametrize("status", ["canceled", "past_due", "incomplete", None])
    def test_inactive_subscription_is_free(self, status):
        subscription = SubscriptionRecord(price_id="price_pro_yearly", status=status)
        plan = resolve_plan("user@example.com", subscription, nobody_privileged, PRICE_MAP)
        assert plan.plan_id == PlanId.FREE

    def test_no_subscription_is_free(self):
        assert resolve_plan(None, None, nobody_privileged, PRICE_MAP).plan_id == PlanId.FREE

    def test_unknown_price_on_active_subscription_is_free(self):
        subscription = SubscriptionRecord(price_id="price_legacy", status="active")
        plan = resolve_plan("user@example.com", subscription, nobody_privileged, PRICE_MAP)
        assert plan.plan_id == PlanId.FREE


class TestOwnerPredicate:
    def test_empty_owner_matches_nobody(self):
        is_owner = make_owner_predicate("")
        assert not is_owner("")
        assert not is_owner(None)
        assert not is_owner("someone@example.com")

    def test_other_email_not_privileged(self):
        assert not make_owner_predicate("owner@example.com")("tenant@example.com")


class TestLimitsAndFeatures:
    def test_usage_below_limit_allowed(self):
        check = check_limit(PLAN_DEFINITIONS[PlanId.FREE], "issues", 2)
        assert check.allowed
        assert check.limit == 3
        assert check.usage == 2
        assert check.plan_id == PlanId.FREE

    def test_usage_at_limit_refused(self):
        assert not check_limit(PLAN_DEFINITIONS[PlanId.FREE], "issues", 3).allowed

    def test_unlimited_plan_always_allowed(self):
        check = check_limit(PLAN_DEFINITIONS[PlanId.PRO], "evidence_files", 10_000)
        assert check.allowed
        assert check.limit == UNLIMITED

    def test_unknown_limit_rejected(self):
        with pytest.raises(ValueError):
            check_limit(PLAN_DEFINITIONS[PlanId.FREE], "tenants", 0)

    def test_has_feature(self):
        assert not has_feature(PLAN_DEFINITIONS[PlanId.FREE], "bulk_uploads")
        assert has_feature(PLAN_DEFINITIONS[PlanId.PLUS], "bulk_uploads")
        assert not has_feature(PLAN_DEFINITIONS[PlanId.PLUS], "sectioned_packs")
        assert has_feature(OWNER_ENTITLEMENTS, "sectioned_packs")

    def test_unknown_feature_rejected(self):
        with pytest.raises(ValueError):
            has_feature(PLAN_DEFINITIONS[PlanId.PRO], "time_travel")


class TestFormatting:
    def test_format_limit(self):
        assert format_limit(UNLIMITED) == "Unlimited"
        assert format_limit(5120) == "5,120"
        assert format_limit(3) == "3"
