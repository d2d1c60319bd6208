"""General dispatch settings."""

from pydantic import Field

from notification_hub.configuration.base import FeatureSettings


class GeneralSettings(FeatureSettings):
    """Global feature flag and defaults.

    Environment Variables:
        NOTIFICATIONS_ENABLED: Master switch; when false every send is skipped
        DEFAULT_TIMEZONE: Timezone assumed for naive timestamps (default: UTC)

    Example:
        ```python
        from notification_hub.services import get_settings

        settings = get_settings()

        if settings.general.NOTIFICATIONS_ENABLED:
            ...
        ```
    """

    NOTIFICATIONS_ENABLED: bool = Field(default=True, alias="NOTIFICATIONS_ENABLED")
    DEFAULT_TIMEZONE: str = Field(default="UTC", alias="DEFAULT_TIMEZONE")
