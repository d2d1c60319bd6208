"""Channel providers.

One provider per delivery channel, all implementing ChannelProvider:

    from notification_hub.channels import InMemoryEmailChannel, InMemorySmsChannel

    providers = {
        NotificationChannel.EMAIL: InMemoryEmailChannel(),
        NotificationChannel.SMS: InMemorySmsChannel(max_message_length=160),
    }
"""

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import (
    EmailNotification,
    InAppNotification,
    InAppNotificationType,
    PhoneNumberValidation,
    PushNotification,
    SmsDeliveryReport,
    SmsNotification,
    WebhookNotification,
    WebhookRegistration,
    WebhookTestResult,
)
from notification_hub.channels.email import InMemoryEmailChannel
from notification_hub.channels.sms import InMemorySmsChannel
from notification_hub.channels.push import InMemoryPushChannel
from notification_hub.channels.in_app import InMemoryInAppChannel
from notification_hub.channels.webhook import (
    HttpWebhookChannel,
    InMemoryWebhookChannel,
    WebhookChannel,
    sign_payload,
)
from notification_hub.channels.payloads import PayloadBuilder, in_app_type_for

__all__ = [
    "ChannelProvider",
    "InMemoryDeliveryTracker",
    "EmailNotification",
    "InAppNotification",
    "InAppNotificationType",
    "PhoneNumberValidation",
    "PushNotification",
    "SmsDeliveryReport",
    "SmsNotification",
    "WebhookNotification",
    "WebhookRegistration",
    "WebhookTestResult",
    "InMemoryEmailChannel",
    "InMemorySmsChannel",
    "InMemoryPushChannel",
    "InMemoryInAppChannel",
    "WebhookChannel",
    "InMemoryWebhookChannel",
    "HttpWebhookChannel",
    "sign_payload",
    "PayloadBuilder",
    "in_app_type_for",
]
