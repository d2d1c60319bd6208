"""Test fixtures for notification hub tests."""

from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from notification_hub.channels import PayloadBuilder
from notification_hub.contacts import Contact, InMemoryContactDirectory
from notification_hub.dispatcher import NotificationDispatcher
from notification_hub.history import InMemoryDeliveryHistoryStore
from notification_hub.models import (
    DeliveryStatus,
    NotificationChannel,
    NotificationPriority,
    NotificationRequest,
    NotificationType,
)
from notification_hub.preferences import (
    InMemoryPreferencesStore,
    PreferenceResolver,
    UserNotificationPreferences,
)
from notification_hub.templates import (
    InMemoryTemplateStore,
    NotificationTemplate,
    TemplateRenderer,
    YAMLTemplateLoader,
)

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """Noon UTC, outside every quiet window used in the tests."""
    return FIXED_NOW


@pytest.fixture
def preferences_store() -> InMemoryPreferencesStore:
    return InMemoryPreferencesStore()


@pytest.fixture
def resolver(preferences_store) -> PreferenceResolver:
    return PreferenceResolver(preferences_store)


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    """Template store preloaded with the packaged YAML templates."""
    store = InMemoryTemplateStore()
    YAMLTemplateLoader().load_into(store)
    return store


@pytest.fixture
def renderer(template_store) -> TemplateRenderer:
    return TemplateRenderer(template_store, default_language="en-US")


@pytest.fixture
def history() -> InMemoryDeliveryHistoryStore:
    return InMemoryDeliveryHistoryStore()


@pytest.fixture
def contacts() -> InMemoryContactDirectory:
    """Directory with one fully addressable user, ``user-1``."""
    return InMemoryContactDirectory(
        [
            Contact(
                user_id="user-1",
                email="john@example.com",
                name="John Doe",
                phone_number="+15555550100",
                device_tokens=["device-token-0001"],
                webhook_url="https://hooks.example.com/notify",
            )
        ]
    )


@pytest.fixture
def payload_builder() -> PayloadBuilder:
    return PayloadBuilder(from_email="noreply@example.com", from_name="Notification Hub")


@pytest.fixture
def mock_provider_factory():
    """Factory for MagicMock channel providers.

    Example:
        email = mock_provider_factory(NotificationChannel.EMAIL)
        failing = mock_provider_factory(
            NotificationChannel.EMAIL, side_effect=RuntimeError("down")
        )
    """

    def _factory(
        channel: NotificationChannel,
        side_effect: Optional[Exception] = None,
        healthy: bool = True,
    ) -> MagicMock:
        provider = MagicMock()
        provider.channel = channel
        provider.send.return_value = f"{channel.value}-message-id"
        provider.send.side_effect = side_effect
        provider.is_healthy.return_value = healthy
        provider.verify_delivery.return_value = DeliveryStatus.DELIVERED
        return provider

    return _factory


@pytest.fixture
def mock_email_provider(mock_provider_factory) -> MagicMock:
    return mock_provider_factory(NotificationChannel.EMAIL)


@pytest.fixture
def mock_sms_provider(mock_provider_factory) -> MagicMock:
    return mock_provider_factory(NotificationChannel.SMS)


@pytest.fixture
def dispatcher_factory(
    resolver, renderer, history, payload_builder, contacts, fixed_now
):
    """Factory for NotificationDispatcher wired to in-memory collaborators.

    The clock is frozen at ``fixed_now`` and the scheduler is a MagicMock
    unless one is given.

    Example:
        dispatcher = dispatcher_factory({NotificationChannel.EMAIL: email})
        disabled = dispatcher_factory(providers, enabled=False)
    """

    def _factory(providers: Dict[NotificationChannel, Any], **kwargs) -> NotificationDispatcher:
        options: Dict[str, Any] = {
            "resolver": resolver,
            "renderer": renderer,
            "history": history,
            "payload_builder": payload_builder,
            "contacts": contacts,
            "scheduler": MagicMock(),
            "clock": lambda: fixed_now,
        }
        options.update(kwargs)
        return NotificationDispatcher(providers=providers, **options)

    return _factory


@pytest.fixture
def request_factory():
    """Factory for NotificationRequest instances.

    Example:
        request = request_factory(template_key="welcome")
        critical = request_factory(priority=NotificationPriority.CRITICAL)
    """

    def _factory(
        user_id: str = "user-1",
        channels: Optional[List[NotificationChannel]] = None,
        notification_type: NotificationType = NotificationType.GENERAL,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        template_key: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        subject: Optional[str] = "Test Notification",
        message: Optional[str] = "Test message",
        **kwargs,
    ) -> NotificationRequest:
        return NotificationRequest(
            user_id=user_id,
            channels=channels
            if channels is not None
            else [NotificationChannel.EMAIL, NotificationChannel.SMS],
            notification_type=notification_type,
            priority=priority,
            template_key=template_key,
            data=data or {},
            subject=subject,
            message=message,
            **kwargs,
        )

    return _factory


@pytest.fixture
def preferences_factory():
    """Factory for UserNotificationPreferences instances.

    Example:
        quiet = preferences_factory(quiet_hours=(time(23, 0), time(6, 0)))
    """

    def _factory(
        user_id: str = "user-1",
        quiet_hours: Optional[tuple] = None,
        **kwargs,
    ) -> UserNotificationPreferences:
        if quiet_hours is not None:
            kwargs["quiet_hours_start"], kwargs["quiet_hours_end"] = quiet_hours
        return UserNotificationPreferences(user_id=user_id, **kwargs)

    return _factory


@pytest.fixture
def template_factory():
    """Factory for NotificationTemplate instances."""

    def _factory(
        key: str = "greeting",
        language: str = "en-US",
        subject: str = "Hello {{ name }}",
        text: str = "Hi {{ name }}",
        **kwargs,
    ) -> NotificationTemplate:
        return NotificationTemplate(
            key=key, language=language, subject=subject, text=text, **kwargs
        )

    return _factory


@pytest.fixture
def quiet_night() -> tuple:
    return (time(23, 0), time(6, 0))
