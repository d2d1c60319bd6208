"""Channel provider abstract base class.

Every delivery backend (email, SMS, push, in-app, webhook) implements
this contract. Channel-specific operations such as topic subscription
or inbox paging live on the concrete provider classes.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from notification_hub.models import DeliveryStatus, NotificationChannel


class ChannelProvider(ABC):
    """Abstract base class for channel providers.

    Example Implementation:
        class PagerChannel(ChannelProvider):

            @property
            def channel(self) -> NotificationChannel:
                return NotificationChannel.SMS

            def send(self, notification: SmsNotification) -> Optional[str]:
                response = self._client.page(notification.phone_number, notification.message)
                if not response.ok:
                    raise ProviderError(response.text, channel=self.channel.value)
                return response.id
    """

    @property
    @abstractmethod
    def channel(self) -> NotificationChannel:
        """Channel served by this provider."""
        pass

    @abstractmethod
    def send(self, notification: Any) -> Optional[str]:
        """Deliver a rendered, channel-specific notification.

        Args:
            notification: Payload model for this channel

        Returns:
            Provider message id, when the backend assigns one.

        Raises:
            ProviderError: On hard delivery failure. The dispatcher catches
                it and records a failed outcome for this channel only.
        """
        pass

    @abstractmethod
    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        """Current delivery status, UNKNOWN if the id was never seen."""
        pass

    @abstractmethod
    def is_healthy(self) -> bool:
        """Whether the backend is reachable and configured."""
        pass


class InMemoryDeliveryTracker:
    """Delivery status bookkeeping shared by the in-memory providers.

    A message recorded as SENT is promoted to DELIVERED when it is first
    verified.
    """

    def __init__(self) -> None:
        self._statuses: Dict[str, DeliveryStatus] = {}
        self._lock = threading.Lock()
        self.healthy = True

    def record(self, notification_id: str, status: DeliveryStatus) -> None:
        with self._lock:
            self._statuses[notification_id] = status

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        with self._lock:
            status = self._statuses.get(notification_id)
            if status is None:
                return DeliveryStatus.UNKNOWN
            if status == DeliveryStatus.SENT:
                status = DeliveryStatus.DELIVERED
                self._statuses[notification_id] = status
            return status

    def is_healthy(self) -> bool:
        return self.healthy
