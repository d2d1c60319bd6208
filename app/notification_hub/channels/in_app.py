"""In-app inbox channel provider (in-memory)."""

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import InAppNotification
from notification_hub.models import DeliveryStatus, NotificationChannel

logger = structlog.get_logger()


class InMemoryInAppChannel(ChannelProvider):
    """Per-user in-app inbox.

    Each user keeps at most ``max_per_user`` notifications; when a new one
    arrives on a full inbox the oldest is discarded. Expired notifications
    are hidden from reads and counts and removed by ``clear_expired``.
    """

    def __init__(self, max_per_user: int = 100):
        self.max_per_user = max_per_user
        self.tracker = InMemoryDeliveryTracker()
        self._inboxes: Dict[str, List[InAppNotification]] = {}
        self._lock = threading.Lock()

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.IN_APP

    def send(self, notification: InAppNotification) -> Optional[str]:
        with self._lock:
            inbox = self._inboxes.setdefault(notification.user_id, [])
            inbox.append(notification.model_copy(deep=True))
            overflow = len(inbox) - self.max_per_user
            if overflow > 0:
                del inbox[:overflow]
        self.tracker.record(notification.notification_id, DeliveryStatus.SENT)
        logger.info(
            "in_app_notification_stored",
            notification_id=notification.notification_id,
            user_id=notification.user_id,
        )
        return notification.notification_id

    def get_notifications(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 20,
        unread_only: bool = False,
        now: Optional[datetime] = None,
    ) -> List[InAppNotification]:
        """Return one page of the user's inbox, newest first."""
        now = now or datetime.now(timezone.utc)
        page = max(page, 1)
        with self._lock:
            visible = [
                n.model_copy(deep=True)
                for n in reversed(self._inboxes.get(user_id, []))
                if not n.is_expired(now) and not (unread_only and n.is_read)
            ]
        visible.sort(key=lambda n: n.created_at, reverse=True)
        start = (page - 1) * page_size
        return visible[start : start + page_size]

    def get_unread_count(self, user_id: str, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            return sum(
                1
                for n in self._inboxes.get(user_id, [])
                if not n.is_read and not n.is_expired(now)
            )

    def mark_as_read(self, user_id: str, notification_id: str) -> bool:
        with self._lock:
            for notification in self._inboxes.get(user_id, []):
                if notification.notification_id == notification_id:
                    if not notification.is_read:
                        notification.is_read = True
                        notification.read_at = datetime.now(timezone.utc)
                    return True
        return False

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread notification read. Returns how many changed."""
        marked = 0
        read_at = datetime.now(timezone.utc)
        with self._lock:
            for notification in self._inboxes.get(user_id, []):
                if not notification.is_read:
                    notification.is_read = True
                    notification.read_at = read_at
                    marked += 1
        return marked

    def delete_notification(self, user_id: str, notification_id: str) -> bool:
        with self._lock:
            inbox = self._inboxes.get(user_id, [])
            remaining = [n for n in inbox if n.notification_id != notification_id]
            self._inboxes[user_id] = remaining
            return len(remaining) != len(inbox)

    def clear_expired(self, now: Optional[datetime] = None) -> int:
        """Remove expired notifications from every inbox. Returns how many."""
        now = now or datetime.now(timezone.utc)
        removed = 0
        with self._lock:
            for user_id, inbox in self._inboxes.items():
                kept = [n for n in inbox if not n.is_expired(now)]
                removed += len(inbox) - len(kept)
                self._inboxes[user_id] = kept
        if removed:
            logger.info("in_app_expired_cleared", removed=removed)
        return removed

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        return self.tracker.verify_delivery(notification_id)

    def is_healthy(self) -> bool:
        return self.tracker.is_healthy()
