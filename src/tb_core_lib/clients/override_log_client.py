"""HTTP client for the override audit service."""

from typing import List, Optional

import httpx

from tb_core_lib.audit.override_log import DEFAULT_HISTORY_LIMIT
from tb_core_lib.clients.base import BaseServiceClient
from tb_core_lib.config.settings import get_settings
from tb_core_lib.models.enforcement import OverrideLogEntry


class OverrideLogClient(BaseServiceClient):
    """Async HTTP client for the override audit service.

    Implements the OverrideLogSink interface, so it can be handed straight
    to an OverrideRecorder.

    Usage:
        client = OverrideLogClient(base_url="http://tb-audit-service:8000")
        recorder = OverrideRecorder(sink=client)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        correlation_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            base_url: Audit service URL (default: OVERRIDE_LOG_URL setting)
            timeout: Request timeout in seconds (default: OVERRIDE_LOG_TIMEOUT setting)
            correlation_id: Correlation ID sent with every request
            transport: Optional httpx transport
        """
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.override_log_url,
            timeout=timeout if timeout is not None else settings.override_log_timeout,
            transport=transport,
        )
        self.correlation_id = correlation_id

    async def write(self, entry: OverrideLogEntry) -> None:
        """Append an override entry.

        Raises:
            httpx.HTTPStatusError: If the audit service rejects the entry
        """
        async with self._get_client() as client:
            response = await client.post(
                f"{self.base_url}/api/v1/override-logs",
                json=entry.model_dump(mode="json"),
                headers=self._headers(user_id=entry.user_id, correlation_id=self.correlation_id),
            )
            response.raise_for_status()

    async def history(self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OverrideLogEntry]:
        """Get a user's override history, newest first.

        Raises:
            httpx.HTTPStatusError: On HTTP error
        """
        async with self._get_client() as client:
            response = await client.get(
                f"{self.base_url}/api/v1/override-logs",
                params={"limit": limit},
                headers=self._headers(user_id=user_id, correlation_id=self.correlation_id),
            )
            response.raise_for_status()
            return [OverrideLogEntry(**item) for item in response.json()]
