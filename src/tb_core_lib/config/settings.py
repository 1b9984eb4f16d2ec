"""Runtime settings for the tenancy core.

Resolves everything the library reads from the environment:
- Owner email that always receives owner entitlements
- Stripe price ids and the plan each one unlocks
- Location and retry budget of the override audit service
"""

import logging
import os
from typing import Dict, Optional

from tb_core_lib.billing.plans import make_owner_predicate
from tb_core_lib.models.enforcement import PlanId

logger = logging.getLogger(__name__)


class Settings:
    """Environment-backed settings.

    Environment Variables:
        APP_OWNER_EMAIL: Privileged owner email (trimmed, case-insensitive)
        STRIPE_PRICE_PLUS_MONTHLY / STRIPE_PRICE_PRO_MONTHLY: Monthly price ids
        STRIPE_PRICE_PLUS_YEARLY / STRIPE_PRICE_PRO_YEARLY: Yearly price ids
        OVERRIDE_LOG_URL: Audit service base URL (default: http://tb-audit-service:8000)
        OVERRIDE_LOG_TIMEOUT: Request timeout in seconds (default: 10.0)
        OVERRIDE_LOG_MAX_ATTEMPTS: Attempts per audit write (default: 3)

    Example:
        ```python
        settings = Settings(owner_email="owner@example.com")
        settings.is_owner_email(" Owner@Example.com ")  # True
        ```
    """

    # Price-id env var -> (fallback id, plan)
    PRICE_ENV_VARS: Dict[str, tuple] = {
        "STRIPE_PRICE_PLUS_MONTHLY": ("price_plus_monthly", PlanId.PLUS),
        "STRIPE_PRICE_PRO_MONTHLY": ("price_pro_monthly", PlanId.PRO),
        "STRIPE_PRICE_PLUS_YEARLY": ("price_plus_yearly", PlanId.PLUS),
        "STRIPE_PRICE_PRO_YEARLY": ("price_pro_yearly", PlanId.PRO),
    }

    DEFAULT_OVERRIDE_LOG_URL = "http://tb-audit-service:8000"
    DEFAULT_OVERRIDE_LOG_TIMEOUT = 10.0
    DEFAULT_OVERRIDE_LOG_MAX_ATTEMPTS = 3

    def __init__(
        self,
        owner_email: Optional[str] = None,
        price_to_plan: Optional[Dict[str, PlanId]] = None,
        override_log_url: Optional[str] = None,
        override_log_timeout: Optional[float] = None,
        override_log_max_attempts: Optional[int] = None,
    ):
        """Initialize settings.

        Args:
            owner_email: Owner email (overrides APP_OWNER_EMAIL env var)
            price_to_plan: Price-id mapping (overrides STRIPE_PRICE_* env vars)
            override_log_url: Audit service URL (overrides OVERRIDE_LOG_URL)
            override_log_timeout: Timeout seconds (overrides OVERRIDE_LOG_TIMEOUT)
            override_log_max_attempts: Attempts (overrides OVERRIDE_LOG_MAX_ATTEMPTS)
        """
        raw_owner = owner_email if owner_email is not None else os.getenv("APP_OWNER_EMAIL", "")
        self.owner_email = raw_owner.strip().lower()

        if price_to_plan is not None:
            self.price_to_plan = {k: PlanId(v) for k, v in price_to_plan.items()}
        else:
            self.price_to_plan = {
                os.getenv(env_key) or fallback: plan
                for env_key, (fallback, plan) in self.PRICE_ENV_VARS.items()
            }

        self.override_log_url = (
            override_log_url
            or os.getenv("OVERRIDE_LOG_URL")
            or self.DEFAULT_OVERRIDE_LOG_URL
        )

        if override_log_timeout is not None:
            self.override_log_timeout = float(override_log_timeout)
        else:
            self.override_log_timeout = self._env_number(
                "OVERRIDE_LOG_TIMEOUT", float, self.DEFAULT_OVERRIDE_LOG_TIMEOUT
            )

        if override_log_max_attempts is not None:
            self.override_log_max_attempts = int(override_log_max_attempts)
        else:
            self.override_log_max_attempts = self._env_number(
                "OVERRIDE_LOG_MAX_ATTEMPTS", int, self.DEFAULT_OVERRIDE_LOG_MAX_ATTEMPTS
            )
        if self.override_log_max_attempts < 1:
            logger.warning(
                f"Invalid override log attempts {self.override_log_max_attempts}, using 1"
            )
            self.override_log_max_attempts = 1

        logger.info(
            f"Settings initialized: owner_configured={bool(self.owner_email)}, "
            f"prices={len(self.price_to_plan)}, "
            f"override_log_url={self.override_log_url}"
        )

    @staticmethod
    def _env_number(env_key: str, cast, default):
        raw = os.getenv(env_key)
        if not raw:
            return default
        try:
            return cast(raw)
        except ValueError:
            logger.warning(f"Invalid value in {env_key}: {raw}, defaulting to {default}")
            return default

    def is_owner_email(self, email: Optional[str]) -> bool:
        """Check if an email matches the configured owner (never true when unset)."""
        return make_owner_predicate(self.owner_email)(email)


# Singleton instance for global access
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global Settings instance."""
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = Settings()

    return _settings_instance


def reset_settings():
    """Reset the global Settings instance.

    Used for testing or reconfiguration.
    """
    global _settings_instance
    _settings_instance = None
