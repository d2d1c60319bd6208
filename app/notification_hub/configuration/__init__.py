"""Configuration module - public API.

Centralized configuration for the notification hub using Pydantic
BaseSettings, organized by concern.

Exports:
    settings: Module-level Settings instance used by logging setup
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from notification_hub.services import get_settings

    settings = get_settings()

    enabled = settings.general.NOTIFICATIONS_ENABLED
    max_sms = settings.sms.SMS_MAX_MESSAGE_LENGTH
    ```
"""

from notification_hub.configuration.settings import Settings, settings

__all__ = ["Settings", "settings"]
