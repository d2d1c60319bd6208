"""Builds channel-specific payloads from rendered content."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from notification_hub.channels.models import (
    EmailNotification,
    InAppNotification,
    InAppNotificationType,
    PushNotification,
    SmsNotification,
    WebhookNotification,
)
from notification_hub.contacts import Contact
from notification_hub.errors import InvalidChannelError, ValidationError
from notification_hub.models import (
    NotificationChannel,
    NotificationRequest,
    NotificationType,
    RenderedContent,
)

IN_APP_TYPES: Dict[NotificationType, InAppNotificationType] = {
    NotificationType.SECURITY_ALERT: InAppNotificationType.ERROR,
    NotificationType.PAYMENT_FAILED: InAppNotificationType.ERROR,
    NotificationType.SYSTEM_MAINTENANCE: InAppNotificationType.WARNING,
    NotificationType.PAYMENT_SUCCESS: InAppNotificationType.SUCCESS,
    NotificationType.ORDER_CONFIRMATION: InAppNotificationType.SUCCESS,
}


def in_app_type_for(notification_type: NotificationType) -> InAppNotificationType:
    return IN_APP_TYPES.get(notification_type, InAppNotificationType.INFO)


class PayloadBuilder:
    """Turns one rendered request into the payload a channel provider expects.

    Attributes:
        from_email: Sender address for email
        from_name: Sender display name for email
        in_app_expiry: Lifetime of in-app notifications without an expiry
        webhook_default_url: Used when the contact has no webhook URL
        webhook_secret: Signing secret for webhook payloads
    """

    def __init__(
        self,
        from_email: str,
        from_name: str,
        in_app_expiry_days: int = 30,
        webhook_default_url: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.from_email = from_email
        self.from_name = from_name
        self.in_app_expiry = timedelta(days=in_app_expiry_days)
        self.webhook_default_url = webhook_default_url
        self.webhook_secret = webhook_secret

    def build(
        self,
        channel: NotificationChannel,
        request: NotificationRequest,
        content: RenderedContent,
        contact: Contact,
        now: datetime,
    ) -> Any:
        """Build the payload for ``channel``.

        Raises:
            ValidationError: If the channel cannot be addressed (no webhook URL)
                or the contact data is malformed.
        """
        if channel == NotificationChannel.EMAIL:
            return EmailNotification(
                notification_id=request.request_id,
                to_email=contact.email,
                to_name=contact.name,
                from_email=self.from_email,
                from_name=self.from_name,
                subject=content.subject,
                html_body=content.html,
                text_body=content.text,
            )
        if channel == NotificationChannel.SMS:
            return SmsNotification(
                notification_id=request.request_id,
                phone_number=contact.phone_number,
                message=content.sms,
            )
        if channel == NotificationChannel.PUSH:
            return PushNotification(
                notification_id=request.request_id,
                device_tokens=contact.device_tokens,
                title=content.push_title,
                body=content.push_body,
                data=dict(request.data),
            )
        if channel == NotificationChannel.IN_APP:
            return InAppNotification(
                notification_id=request.request_id,
                user_id=request.user_id,
                title=content.subject,
                content=content.text,
                type=in_app_type_for(request.notification_type),
                action_url=request.metadata.get("action_url"),
                created_at=now,
                expires_at=request.expires_at or now + self.in_app_expiry,
            )
        if channel == NotificationChannel.WEBHOOK:
            url = contact.webhook_url or self.webhook_default_url
            if not url:
                raise ValidationError(
                    f"No webhook URL configured for user {request.user_id}"
                )
            return WebhookNotification(
                notification_id=request.request_id,
                url=url,
                secret=self.webhook_secret,
                payload={
                    "notification_id": request.request_id,
                    "user_id": request.user_id,
                    "type": request.notification_type.value,
                    "data": dict(request.data),
                    "template_key": content.template_key,
                    "subject": content.subject,
                    "text": content.text,
                    "timestamp": now.isoformat(),
                },
            )
        raise InvalidChannelError(channel)
