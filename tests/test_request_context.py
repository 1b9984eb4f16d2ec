"""Tests for gateway header extraction."""

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from tb_core_lib.auth import RequestContext, get_request_context
from tb_core_lib.billing import OWNER_ENTITLEMENTS, PlanId, SubscriptionRecord
from tb_core_lib.config import Settings


def make_request(headers):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/issues/issue-1/close",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


class TestGetRequestContext:
    def test_extracts_gateway_headers(self):
        ctx = get_request_context(make_request({
            "X-User-ID": "user-1",
            "X-User-Email": "tenant@example.com",
            "X-Correlation-ID": "req-42",
        }))
        assert ctx == RequestContext(
            user_id="user-1", user_email="tenant@example.com", correlation_id="req-42"
        )

    def test_optional_headers_default_to_none(self):
        ctx = get_request_context(make_request({"X-User-ID": "user-1"}))
        assert ctx.user_email is None
        assert ctx.correlation_id is None

    def test_missing_user_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc:
            get_request_context(make_request({"X-User-Email": "tenant@example.com"}))
        assert exc.value.status_code == 401


class TestResolvePlan:
    settings = Settings(
        owner_email="owner@example.com",
        price_to_plan={"price_plus": PlanId.PLUS},
    )

    def test_owner_header_gets_owner_entitlements(self):
        ctx = RequestContext(user_id="u", user_email="Owner@Example.com")
        assert ctx.resolve_plan(None, settings=self.settings) == OWNER_ENTITLEMENTS

    def test_subscription_plan(self):
        ctx = RequestContext(user_id="u", user_email="tenant@example.com")
        subscription = SubscriptionRecord(price_id="price_plus", status="active")
        assert ctx.resolve_plan(subscription, settings=self.settings).plan_id == PlanId.PLUS

    def test_uses_global_settings_by_default(self, monkeypatch):
        monkeypatch.setenv("APP_OWNER_EMAIL", "boss@example.com")
        ctx = RequestContext(user_id="u", user_email="boss@example.com")
        assert ctx.resolve_plan(None).is_owner
