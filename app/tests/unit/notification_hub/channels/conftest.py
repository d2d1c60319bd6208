"""Test fixtures for channel provider tests."""

from typing import Optional

import pytest

from notification_hub.channels import (
    EmailNotification,
    InAppNotification,
    PushNotification,
    SmsNotification,
    WebhookNotification,
)


@pytest.fixture
def email_notification_factory():
    """Factory for EmailNotification payloads."""

    def _factory(
        notification_id: str = "req-1",
        to_email: Optional[str] = "john@example.com",
        subject: str = "Hello",
    ) -> EmailNotification:
        return EmailNotification(
            notification_id=notification_id,
            to_email=to_email,
            to_name="John",
            from_email="noreply@example.com",
            from_name="Notification Hub",
            subject=subject,
            html_body="<p>Hi</p>",
            text_body="Hi",
        )

    return _factory


@pytest.fixture
def sms_notification_factory():
    def _factory(
        notification_id: str = "req-1",
        phone_number: Optional[str] = "+15555550100",
        message: str = "Your code is 1234",
    ) -> SmsNotification:
        return SmsNotification(
            notification_id=notification_id,
            phone_number=phone_number,
            message=message,
        )

    return _factory


@pytest.fixture
def push_notification_factory():
    def _factory(notification_id: str = "req-1", **kwargs) -> PushNotification:
        kwargs.setdefault("device_tokens", ["device-token-0001"])
        return PushNotification(
            notification_id=notification_id, title="Title", body="Body", **kwargs
        )

    return _factory


@pytest.fixture
def in_app_notification_factory():
    def _factory(
        notification_id: str = "req-1", user_id: str = "user-1", **kwargs
    ) -> InAppNotification:
        return InAppNotification(
            notification_id=notification_id,
            user_id=user_id,
            title="Title",
            content="Content",
            **kwargs,
        )

    return _factory


@pytest.fixture
def webhook_notification_factory():
    def _factory(
        notification_id: str = "req-1",
        url: str = "https://hooks.example.com/notify",
        **kwargs,
    ) -> WebhookNotification:
        kwargs.setdefault("payload", {"notification_id": notification_id})
        return WebhookNotification(notification_id=notification_id, url=url, **kwargs)

    return _factory
