"""Webhook channel settings."""

from pydantic import Field

from notification_hub.configuration.base import IntegrationSettings


class WebhookSettings(IntegrationSettings):
    """Outbound webhook configuration.

    Environment Variables:
        WEBHOOK_DEFAULT_URL: URL used when the recipient has no webhook of their own
        WEBHOOK_SECRET: Shared secret used to sign payloads
        WEBHOOK_HTTP_ENABLED: POST webhooks over HTTP instead of recording them in memory (default: False)
        WEBHOOK_TIMEOUT_SECONDS: HTTP timeout for webhook calls (default: 10)

    Example:
        ```python
        from notification_hub.services import get_settings

        settings = get_settings()

        url = settings.webhook.WEBHOOK_DEFAULT_URL
        ```
    """

    WEBHOOK_DEFAULT_URL: str | None = Field(default=None, alias="WEBHOOK_DEFAULT_URL")
    WEBHOOK_SECRET: str | None = Field(default=None, alias="WEBHOOK_SECRET")
    WEBHOOK_HTTP_ENABLED: bool = Field(default=False, alias="WEBHOOK_HTTP_ENABLED")
    WEBHOOK_TIMEOUT_SECONDS: int = Field(default=10, alias="WEBHOOK_TIMEOUT_SECONDS")
