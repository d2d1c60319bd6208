"""Notification Hub - multi-channel notification dispatch.

Delivers one logical notification to a user over email, SMS, push,
in-app and webhook channels, honouring the user's preferences (global
toggles, per-type overrides, do-not-disturb, quiet hours) and rendering
localized templates.

Usage:
    from notification_hub import (
        NotificationChannel,
        NotificationRequest,
        NotificationType,
    )
    from notification_hub.services import get_notification_service

    service = get_notification_service()
    result = service.send(
        NotificationRequest(
            user_id="user-1",
            notification_type=NotificationType.WELCOME,
            channels=[NotificationChannel.EMAIL, NotificationChannel.SMS],
            template_key="welcome",
            data={"user": {"first_name": "John"}},
        )
    )
"""

from notification_hub.errors import (
    InvalidChannelError,
    NotFoundError,
    NotificationError,
    ProviderError,
    TemplateNotFoundError,
    ValidationError,
)
from notification_hub.models import (
    BulkDispatchResult,
    BulkNotificationRequest,
    DeliveryOutcome,
    DeliveryStatus,
    DispatchResult,
    DispatchState,
    NotificationChannel,
    NotificationPriority,
    NotificationRequest,
    NotificationType,
    RenderedContent,
    ScheduledNotificationRequest,
    SkipReason,
)
from notification_hub.contacts import (
    Contact,
    ContactDirectory,
    InMemoryContactDirectory,
)
from notification_hub.history import DeliveryHistoryStore, InMemoryDeliveryHistoryStore
from notification_hub.scheduler import NotificationScheduler, TimerScheduler
from notification_hub.dispatcher import NotificationDispatcher
from notification_hub.service import NotificationService

__all__ = [
    # Errors
    "NotificationError",
    "ValidationError",
    "InvalidChannelError",
    "NotFoundError",
    "TemplateNotFoundError",
    "ProviderError",
    # Models
    "NotificationChannel",
    "NotificationPriority",
    "NotificationType",
    "DeliveryStatus",
    "SkipReason",
    "DispatchState",
    "NotificationRequest",
    "BulkNotificationRequest",
    "ScheduledNotificationRequest",
    "RenderedContent",
    "DeliveryOutcome",
    "DispatchResult",
    "BulkDispatchResult",
    # Collaborators
    "Contact",
    "ContactDirectory",
    "InMemoryContactDirectory",
    "DeliveryHistoryStore",
    "InMemoryDeliveryHistoryStore",
    "NotificationScheduler",
    "TimerScheduler",
    # Dispatch
    "NotificationDispatcher",
    "NotificationService",
]
