"""SMS channel provider (in-memory)."""

import threading
from typing import Dict, List, Optional

import structlog

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import (
    PhoneNumberValidation,
    SmsDeliveryReport,
    SmsNotification,
)
from notification_hub.errors import ProviderError
from notification_hub.models import DeliveryStatus, NotificationChannel

logger = structlog.get_logger()


class InMemorySmsChannel(ChannelProvider):
    """SMS provider that records messages instead of sending them.

    Phone numbers must be in E.164 format (+15551234567). Messages longer
    than ``max_message_length`` are accepted but logged as a warning,
    since carriers will split them.
    """

    def __init__(self, max_message_length: int = 160):
        self.max_message_length = max_message_length
        self.tracker = InMemoryDeliveryTracker()
        self.sent: List[SmsNotification] = []
        self._reports: Dict[str, SmsDeliveryReport] = {}
        self._lock = threading.Lock()

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.SMS

    def send(self, notification: SmsNotification) -> Optional[str]:
        validation = self.validate_phone_number(notification.phone_number or "")
        if not validation.is_valid:
            self._report(notification, DeliveryStatus.FAILED, validation.error)
            raise ProviderError(validation.error, channel=self.channel.value)

        if len(notification.message) > self.max_message_length:
            logger.warning(
                "sms_message_too_long",
                notification_id=notification.notification_id,
                length=len(notification.message),
                max_length=self.max_message_length,
            )

        with self._lock:
            self.sent.append(notification)
        self._report(notification, DeliveryStatus.SENT)
        logger.info("sms_sent", notification_id=notification.notification_id)
        return notification.notification_id

    def validate_phone_number(self, phone_number: str) -> PhoneNumberValidation:
        """Check that a number is in E.164 format."""
        digits = phone_number.replace(" ", "").replace("-", "")
        if not digits:
            return PhoneNumberValidation(
                phone_number=phone_number,
                is_valid=False,
                error="Phone number is required",
            )
        if not digits.startswith("+") or not digits[1:].isdigit():
            return PhoneNumberValidation(
                phone_number=phone_number,
                is_valid=False,
                error=f"Phone number must be in E.164 format: {phone_number}",
            )
        if not 8 <= len(digits) <= 16:
            return PhoneNumberValidation(
                phone_number=phone_number,
                is_valid=False,
                error=f"Phone number length invalid: {phone_number}",
            )
        return PhoneNumberValidation(
            phone_number=phone_number, is_valid=True, formatted=digits
        )

    def get_delivery_report(self, notification_id: str) -> Optional[SmsDeliveryReport]:
        with self._lock:
            report = self._reports.get(notification_id)
        if report is None:
            return None
        return report.model_copy(
            update={"status": self.verify_delivery(notification_id)}
        )

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        return self.tracker.verify_delivery(notification_id)

    def is_healthy(self) -> bool:
        return self.tracker.is_healthy()

    def _report(
        self,
        notification: SmsNotification,
        status: DeliveryStatus,
        error: Optional[str] = None,
    ) -> None:
        self.tracker.record(notification.notification_id, status)
        with self._lock:
            self._reports[notification.notification_id] = SmsDeliveryReport(
                notification_id=notification.notification_id,
                phone_number=notification.phone_number,
                status=status,
                error=error,
            )
