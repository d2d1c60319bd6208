"""Integration settings __init__ - exports all channel settings."""

from notification_hub.configuration.integrations.email import EmailSettings
from notification_hub.configuration.integrations.sms import SmsSettings
from notification_hub.configuration.integrations.push import PushSettings
from notification_hub.configuration.integrations.in_app import InAppSettings
from notification_hub.configuration.integrations.webhook import WebhookSettings

__all__ = [
    "EmailSettings",
    "SmsSettings",
    "PushSettings",
    "InAppSettings",
    "WebhookSettings",
]
