"""
Service providers.

Provides the cached singletons used by applications embedding the hub.
"""

from notification_hub.services.providers import (
    get_settings,
    get_notification_service,
)

__all__ = [
    "get_settings",
    "get_notification_service",
]
