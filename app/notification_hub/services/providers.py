"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for the notification hub.
"""

from functools import lru_cache

from notification_hub.configuration import Settings
from notification_hub.service import NotificationService


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.
    Tests that need different values construct Settings(...) directly.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    Returns:
        NotificationService: In-memory service configured from get_settings().

    Usage:
        service = get_notification_service()
        service.send(request)
    """
    return NotificationService(get_settings())
