"""Notification delivery adapters."""

from dinepick.infrastructure.adapters.notification.webhook_notification_dispatcher import (
    SIGNATURE_HEADER,
    NotificationDeliveryError,
    WebhookNotificationDispatcher,
    WebhookNotificationPayload,
)

__all__ = [
    "NotificationDeliveryError",
    "SIGNATURE_HEADER",
    "WebhookNotificationDispatcher",
    "WebhookNotificationPayload",
]
