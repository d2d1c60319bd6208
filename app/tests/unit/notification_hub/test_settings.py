"""Unit tests for notification hub settings."""

import pytest

from notification_hub.configuration import Settings
from notification_hub.configuration.features import DeliverySettings, GeneralSettings
from notification_hub.configuration.integrations import WebhookSettings


@pytest.mark.unit
class TestSettingsDefaults:
    """Tests for default values of every settings section."""

    def test_defaults(self, monkeypatch):
        for name in (
            "NOTIFICATIONS_ENABLED",
            "DELIVERY_BATCH_SIZE",
            "TEMPLATE_DEFAULT_LANGUAGE",
            "WEBHOOK_DEFAULT_URL",
            "WEBHOOK_HTTP_ENABLED",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.general.NOTIFICATIONS_ENABLED is True
        assert settings.general.DEFAULT_TIMEZONE == "UTC"
        assert settings.delivery.DELIVERY_BATCH_SIZE == 100
        assert settings.delivery.DELIVERY_MAX_RETRY_ATTEMPTS == 3
        assert settings.delivery.DELIVERY_MAX_CHANNEL_WORKERS == 5
        assert settings.delivery.DELIVERY_HISTORY_LIMIT == 1000
        assert settings.templates.TEMPLATE_DEFAULT_LANGUAGE == "en-US"
        assert settings.templates.TEMPLATE_SUPPORTED_LANGUAGES == ["en-US", "fr-FR"]
        assert settings.templates.TEMPLATE_DIRECTORY is None
        assert settings.email.EMAIL_FROM_ADDRESS == "noreply@example.com"
        assert settings.sms.SMS_MAX_MESSAGE_LENGTH == 160
        assert settings.push.PUSH_MIN_TOKEN_LENGTH == 11
        assert settings.in_app.IN_APP_MAX_PER_USER == 100
        assert settings.in_app.IN_APP_DEFAULT_EXPIRY_DAYS == 30
        assert settings.webhook.WEBHOOK_DEFAULT_URL is None
        assert settings.webhook.WEBHOOK_TIMEOUT_SECONDS == 10
        assert settings.webhook.WEBHOOK_HTTP_ENABLED is False

    def test_is_production_follows_prefix(self):
        assert Settings(PREFIX="").is_production is True
        assert Settings(PREFIX="dev-").is_production is False


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Tests for environment variable overrides."""

    def test_feature_flag_from_env(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")

        assert GeneralSettings().NOTIFICATIONS_ENABLED is False

    def test_delivery_values_from_env(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_BATCH_SIZE", "50")
        monkeypatch.setenv("DELIVERY_MAX_RETRY_ATTEMPTS", "5")

        delivery = DeliverySettings()

        assert delivery.DELIVERY_BATCH_SIZE == 50
        assert delivery.DELIVERY_MAX_RETRY_ATTEMPTS == 5

    def test_webhook_values_from_env(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_DEFAULT_URL", "https://hooks.example.com")
        monkeypatch.setenv("WEBHOOK_SECRET", "s3cret")

        webhook = WebhookSettings()

        assert webhook.WEBHOOK_DEFAULT_URL == "https://hooks.example.com"
        assert webhook.WEBHOOK_SECRET == "s3cret"

    def test_section_override_via_kwargs(self):
        settings = Settings(delivery=DeliverySettings(DELIVERY_BATCH_SIZE=10))

        assert settings.delivery.DELIVERY_BATCH_SIZE == 10
