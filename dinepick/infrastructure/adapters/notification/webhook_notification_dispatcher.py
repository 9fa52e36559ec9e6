"""Webhook notification dispatcher.

Delivers notifications by POSTing a JSON payload to a single configured
endpoint (a push gateway, for example). Each delivery is retried with
exponential backoff; once every attempt has failed the dispatcher raises
NotificationDeliveryError so the dispatch worker can log and count it.

When a secret is configured, the payload is signed with HMAC-SHA256 and
the digest sent in the ``X-DinePick-Signature`` header.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from pydantic import BaseModel, Field
from uuid6 import uuid7

from dinepick.domain.exceptions import DinePickError

log = structlog.get_logger()

SIGNATURE_HEADER = "X-DinePick-Signature"


class NotificationDeliveryError(DinePickError):
    """Raised when a notification could not be delivered after all retries."""

    def __init__(self, notification_id: UUID, attempts: int, reason: str) -> None:
        self.notification_id = notification_id
        self.attempts = attempts
        self.reason = reason
        super().__init__(
            f"Notification {notification_id} not delivered after {attempts} attempts: {reason}"
        )


class WebhookNotificationPayload(BaseModel):
    """JSON body posted to the webhook endpoint."""

    notification_id: UUID = Field(default_factory=uuid7)
    kind: str
    title: str
    body: str
    user_ids: list[UUID]
    data: dict[str, Any] = Field(default_factory=dict)


class WebhookNotificationDispatcher:
    """NotificationDispatcherProtocol implementation over HTTP.

    Args:
        url: Endpoint receiving the POSTs.
        timeout_seconds: Per-request timeout.
        max_retries: Attempts per notification (at least 1).
        secret: Optional HMAC secret for payload signatures.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
        backoff_base_seconds: Delay before the second attempt; doubles on
            each further attempt.
        sleep: Awaitable sleep used between attempts.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        max_retries: int = 3,
        secret: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_base_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self._url = url
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._secret = secret
        self._transport = transport
        self._backoff_base = backoff_base_seconds
        self._sleep = sleep

    async def notify(
        self,
        user_id: UUID,
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        await self._deliver(
            WebhookNotificationPayload(
                kind=kind, title=title, body=body, user_ids=[user_id], data=data
            )
        )

    async def notify_many(
        self,
        user_ids: Sequence[UUID],
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        await self._deliver(
            WebhookNotificationPayload(
                kind=kind, title=title, body=body, user_ids=list(user_ids), data=data
            )
        )

    def sign(self, payload_json: str) -> Optional[str]:
        """Signature header value for a serialized payload, if a secret is set."""
        if not self._secret:
            return None
        digest = hmac.new(
            self._secret.encode(),
            payload_json.encode(),
            hashlib.sha256,
        ).hexdigest()
        return f"sha256={digest}"

    async def _deliver(self, payload: WebhookNotificationPayload) -> None:
        payload_json = payload.model_dump_json()
        headers = {"Content-Type": "application/json"}
        signature = self.sign(payload_json)
        if signature is not None:
            headers[SIGNATURE_HEADER] = signature

        last_error = "no attempt made"
        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(self._max_retries):
                try:
                    response = await client.post(
                        self._url,
                        content=payload_json,
                        headers=headers,
                        timeout=self._timeout,
                    )

                    if response.status_code < 300:
                        log.info(
                            "webhook_delivered",
                            notification_id=str(payload.notification_id),
                            kind=payload.kind,
                            recipients=len(payload.user_ids),
                            status_code=response.status_code,
                            attempt=attempt + 1,
                        )
                        return

                    last_error = f"HTTP {response.status_code}"
                    log.warning(
                        "webhook_delivery_failed",
                        notification_id=str(payload.notification_id),
                        status_code=response.status_code,
                        attempt=attempt + 1,
                    )

                except httpx.HTTPError as e:
                    last_error = str(e) or type(e).__name__
                    log.warning(
                        "webhook_delivery_error",
                        notification_id=str(payload.notification_id),
                        error=last_error,
                        attempt=attempt + 1,
                    )

                if attempt < self._max_retries - 1:
                    await self._sleep(self._backoff_base * (2**attempt))

        log.error(
            "webhook_delivery_exhausted",
            notification_id=str(payload.notification_id),
            kind=payload.kind,
            max_retries=self._max_retries,
        )
        raise NotificationDeliveryError(payload.notification_id, self._max_retries, last_error)
