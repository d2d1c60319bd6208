"""Email channel settings."""

from pydantic import Field

from notification_hub.configuration.base import IntegrationSettings


class EmailSettings(IntegrationSettings):
    """Sender identity for outbound email.

    Environment Variables:
        EMAIL_FROM_ADDRESS: Envelope sender address
        EMAIL_FROM_NAME: Display name of the sender
    """

    EMAIL_FROM_ADDRESS: str = Field(
        default="noreply@example.com", alias="EMAIL_FROM_ADDRESS"
    )
    EMAIL_FROM_NAME: str = Field(default="Notification Hub", alias="EMAIL_FROM_NAME")
