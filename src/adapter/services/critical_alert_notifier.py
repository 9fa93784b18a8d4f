import logging
from typing import Any, Dict, Optional

import httpx

from src.app.services.critical_alert_notifier import ICriticalAlertNotifier
from src.app.use_cases.logs.dtos import EventRecordInput

logger = logging.getLogger(__name__)


def alert_payload(record_id: int, event: EventRecordInput) -> Dict[str, Any]:
    return {
        "recordId": record_id,
        "type": event.type.value,
        "level": event.level.value,
        "operation": event.operation,
        "entity": event.entity,
        "actor": event.actor,
        "endpoint": event.endpoint,
        "method": event.method,
        "errorMessage": event.error_message,
    }


class LoggingCriticalAlertNotifier(ICriticalAlertNotifier):
    """Raises the alert on the application log only"""

    async def notify(self, record_id: int, event: EventRecordInput) -> None:
        logger.critical(
            f"Critical audit event #{record_id} {event.type.value}/{event.operation}: "
            f"{event.error_message or ''}"
        )


class WebhookCriticalAlertNotifier(ICriticalAlertNotifier):
    """
    Posts critical events as JSON to an alerting endpoint.

    Business Rules:
    - Any non-2xx answer is a delivery failure and raises httpx.HTTPStatusError
    - recipient, when configured, is forwarded for mail-relay endpoints
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        recipient: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.recipient = recipient
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def notify(self, record_id: int, event: EventRecordInput) -> None:
        payload = alert_payload(record_id, event)
        if self.recipient:
            payload["recipient"] = self.recipient

        client = await self._ensure_client()
        response = await client.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        logger.info(f"Critical alert for event #{record_id} delivered to {self.url}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
