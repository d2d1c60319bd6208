"""Feature settings __init__ - exports all feature settings."""

from notification_hub.configuration.features.general import GeneralSettings
from notification_hub.configuration.features.delivery import DeliverySettings
from notification_hub.configuration.features.templates import TemplateSettings

__all__ = [
    "GeneralSettings",
    "DeliverySettings",
    "TemplateSettings",
]
