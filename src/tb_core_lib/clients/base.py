"""Base service client for internal service-to-service calls."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class BaseServiceClient:
    """Base class for internal service-to-service HTTP clients.

    Services call each other directly; the acting user and request trace
    are propagated via X-User-ID / X-User-Email / X-Correlation-ID headers.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize service client.

        Args:
            base_url: Service base URL (e.g., http://tb-audit-service:8000)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

        logger.info(f"Initialized {self.__class__.__name__} with base_url={base_url}")

    def _headers(
        self,
        user_id: Optional[str] = None,
        user_email: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> dict:
        """Generate request headers with user context."""
        headers = {
            "Content-Type": "application/json",
        }

        if user_id:
            headers["X-User-ID"] = user_id

        if user_email:
            headers["X-User-Email"] = user_email

        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client instance with configured timeout.

        Returns:
            Configured AsyncClient ready for use with async context manager
        """
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
