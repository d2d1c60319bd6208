"""Notification Hub configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Feature settings
from notification_hub.configuration.features import (
    GeneralSettings,
    DeliverySettings,
    TemplateSettings,
)

# Channel settings
from notification_hub.configuration.integrations import (
    EmailSettings,
    SmsSettings,
    PushSettings,
    InAppSettings,
    WebhookSettings,
)


class Settings(BaseSettings):
    """Notification Hub configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Features**: dispatch behaviour (feature flag, batching, templates)
    - **Integrations**: per-channel backend configuration

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from notification_hub.services import get_settings

        settings = get_settings()

        batch_size = settings.delivery.DELIVERY_BATCH_SIZE
        default_language = settings.templates.TEMPLATE_DEFAULT_LANGUAGE

        if settings.is_production:
            ...
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    # Feature settings
    general: GeneralSettings
    delivery: DeliverySettings
    templates: TemplateSettings

    # Channel settings
    email: EmailSettings
    sms: SmsSettings
    push: PushSettings
    in_app: InAppSettings
    webhook: WebhookSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Features
            "general": GeneralSettings,
            "delivery": DeliverySettings,
            "templates": TemplateSettings,
            # Channels
            "email": EmailSettings,
            "sms": SmsSettings,
            "push": PushSettings,
            "in_app": InAppSettings,
            "webhook": WebhookSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)


settings = Settings()
