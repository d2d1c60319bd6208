"""Push channel settings."""

from pydantic import Field

from notification_hub.configuration.base import IntegrationSettings


class PushSettings(IntegrationSettings):
    """Push channel configuration.

    Environment Variables:
        PUSH_MIN_TOKEN_LENGTH: Shortest device token accepted by validate_tokens
    """

    PUSH_MIN_TOKEN_LENGTH: int = Field(default=11, alias="PUSH_MIN_TOKEN_LENGTH")
