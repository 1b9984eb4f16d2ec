"""Request context extraction from API Gateway headers.

The actor of an override entry and the email used for plan resolution
both come from the X-User-* headers the API Gateway adds after JWT
validation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status

from tb_core_lib.billing.plans import (
    PlanEntitlements,
    SubscriptionRecord,
    make_owner_predicate,
    resolve_plan,
)
from tb_core_lib.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """User request context extracted from API Gateway headers.

    Attributes:
        user_id: User ID from X-User-ID header
        user_email: User email from X-User-Email header
        correlation_id: Optional correlation ID for request tracing
    """

    user_id: str
    user_email: Optional[str] = None
    correlation_id: Optional[str] = None

    def resolve_plan(
        self,
        subscription: Optional[SubscriptionRecord],
        settings: Optional[Settings] = None,
    ) -> PlanEntitlements:
        """Entitlements for this user, using the configured owner email and price ids."""
        settings = settings or get_settings()
        return resolve_plan(
            self.user_email,
            subscription,
            is_privileged_user=make_owner_predicate(settings.owner_email),
            price_map=settings.price_to_plan,
        )


def get_request_context(request: Request) -> RequestContext:
    """Extract request context from API Gateway headers.

    Usable directly as a FastAPI dependency.

    Args:
        request: FastAPI request object

    Returns:
        RequestContext with user information

    Raises:
        HTTPException: If required X-User-ID header is missing
    """
    user_id = request.headers.get("X-User-ID")
    if not user_id:
        logger.error("Missing X-User-ID header in request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header required (should be added by API Gateway)",
        )

    return RequestContext(
        user_id=user_id,
        user_email=request.headers.get("X-User-Email") or None,
        correlation_id=request.headers.get("X-Correlation-ID") or None,
    )
