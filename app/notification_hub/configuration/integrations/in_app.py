"""In-app channel settings."""

from pydantic import Field

from notification_hub.configuration.base import IntegrationSettings


class InAppSettings(IntegrationSettings):
    """In-app inbox configuration.

    Environment Variables:
        IN_APP_MAX_PER_USER: Notifications retained per user, oldest dropped first
        IN_APP_DEFAULT_EXPIRY_DAYS: Days before an in-app notification expires
    """

    IN_APP_MAX_PER_USER: int = Field(default=100, alias="IN_APP_MAX_PER_USER", gt=0)
    IN_APP_DEFAULT_EXPIRY_DAYS: int = Field(
        default=30, alias="IN_APP_DEFAULT_EXPIRY_DAYS"
    )
