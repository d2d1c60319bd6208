"""Push channel provider (in-memory)."""

import threading
from typing import Dict, List, Optional, Set

import structlog

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import PushNotification
from notification_hub.errors import ProviderError, ValidationError
from notification_hub.models import DeliveryStatus, NotificationChannel

logger = structlog.get_logger()


class InMemoryPushChannel(ChannelProvider):
    """Push provider with device-token and topic delivery.

    Topic subscriptions are kept per topic; sending to a topic fans out
    to the subscribed tokens at send time.

    Attributes:
        min_token_length: Tokens shorter than this are rejected
        sent: Accepted notifications in send order
    """

    def __init__(self, min_token_length: int = 11):
        self.min_token_length = min_token_length
        self.tracker = InMemoryDeliveryTracker()
        self.sent: List[PushNotification] = []
        self._topics: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.PUSH

    def send(self, notification: PushNotification) -> Optional[str]:
        if notification.topic:
            return self.send_to_topic(notification.topic, notification)

        tokens = self.validate_tokens(notification.device_tokens)
        if not tokens:
            self.tracker.record(notification.notification_id, DeliveryStatus.FAILED)
            raise ProviderError(
                "No valid device tokens for recipient", channel=self.channel.value
            )

        return self._deliver(notification.model_copy(update={"device_tokens": tokens}))

    def send_to_topic(self, topic: str, notification: PushNotification) -> Optional[str]:
        """Deliver to every device subscribed to ``topic``."""
        if not topic or not topic.strip():
            raise ValidationError("Topic is required")

        with self._lock:
            tokens = sorted(self._topics.get(topic, set()))
        logger.info(
            "push_topic_send",
            topic=topic,
            subscriber_count=len(tokens),
            notification_id=notification.notification_id,
        )
        return self._deliver(
            notification.model_copy(update={"topic": topic, "device_tokens": tokens})
        )

    def subscribe_to_topic(self, topic: str, device_tokens: List[str]) -> int:
        """Subscribe valid tokens to a topic. Returns the number subscribed."""
        if not topic or not topic.strip():
            raise ValidationError("Topic is required")
        tokens = self.validate_tokens(device_tokens)
        with self._lock:
            self._topics.setdefault(topic, set()).update(tokens)
        return len(tokens)

    def unsubscribe_from_topic(self, topic: str, device_tokens: List[str]) -> int:
        """Remove tokens from a topic. Returns the number removed."""
        with self._lock:
            subscribers = self._topics.get(topic, set())
            removed = subscribers.intersection(device_tokens)
            subscribers.difference_update(removed)
            if not subscribers:
                self._topics.pop(topic, None)
        return len(removed)

    def get_topic_subscribers(self, topic: str) -> List[str]:
        with self._lock:
            return sorted(self._topics.get(topic, set()))

    def validate_tokens(self, device_tokens: List[str]) -> List[str]:
        """Drop blank tokens and tokens shorter than ``min_token_length``."""
        return [
            token
            for token in device_tokens
            if token and token.strip() and len(token) >= self.min_token_length
        ]

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        return self.tracker.verify_delivery(notification_id)

    def is_healthy(self) -> bool:
        return self.tracker.is_healthy()

    def _deliver(self, notification: PushNotification) -> str:
        with self._lock:
            self.sent.append(notification)
        self.tracker.record(notification.notification_id, DeliveryStatus.SENT)
        logger.info(
            "push_sent",
            notification_id=notification.notification_id,
            device_count=len(notification.device_tokens),
        )
        return notification.notification_id
