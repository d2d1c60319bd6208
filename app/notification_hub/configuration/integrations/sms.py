"""SMS channel settings."""

from pydantic import Field

from notification_hub.configuration.base import IntegrationSettings


class SmsSettings(IntegrationSettings):
    """SMS channel configuration.

    Environment Variables:
        SMS_MAX_MESSAGE_LENGTH: Length above which a warning is logged (default: 160)
    """

    SMS_MAX_MESSAGE_LENGTH: int = Field(default=160, alias="SMS_MAX_MESSAGE_LENGTH")
