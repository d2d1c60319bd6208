"""Email channel provider (in-memory)."""

import threading
from typing import List, Optional

import structlog

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import EmailNotification
from notification_hub.errors import ProviderError
from notification_hub.models import DeliveryStatus, NotificationChannel

logger = structlog.get_logger()


class InMemoryEmailChannel(ChannelProvider):
    """Email provider that records messages instead of sending them.

    Useful for development and tests; ``sent`` holds every accepted
    message in send order.
    """

    def __init__(self) -> None:
        self.tracker = InMemoryDeliveryTracker()
        self.sent: List[EmailNotification] = []
        self._lock = threading.Lock()

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.EMAIL

    def send(self, notification: EmailNotification) -> Optional[str]:
        if not notification.to_email:
            self.tracker.record(notification.notification_id, DeliveryStatus.FAILED)
            raise ProviderError(
                "Recipient has no email address", channel=self.channel.value
            )

        with self._lock:
            self.sent.append(notification)
        self.tracker.record(notification.notification_id, DeliveryStatus.SENT)
        logger.info(
            "email_sent",
            notification_id=notification.notification_id,
            subject=notification.subject,
        )
        return notification.notification_id

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        return self.tracker.verify_delivery(notification_id)

    def is_healthy(self) -> bool:
        return self.tracker.is_healthy()
