"""Unit tests for webhook providers."""

import hashlib
import hmac
import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from notification_hub.channels import (
    HttpWebhookChannel,
    InMemoryWebhookChannel,
    sign_payload,
)
from notification_hub.errors import ProviderError, ValidationError
from notification_hub.models import DeliveryStatus

URL = "https://hooks.example.com/notify"


def _response(status_code: int = 200, headers=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = headers or {"Content-Type": "application/json"}
    return response


@pytest.mark.unit
class TestSignPayload:
    """Tests for sign_payload()."""

    def test_hmac_sha256_hex_digest(self):
        expected = hmac.new(b"secret", b'{"a": 1}', hashlib.sha256).hexdigest()

        assert sign_payload('{"a": 1}', "secret") == expected


@pytest.mark.unit
class TestWebhookRegistry:
    """Tests for the registration API shared by webhook providers."""

    def test_register_and_filter_by_event(self):
        channel = InMemoryWebhookChannel()
        channel.register_webhook(URL, secret="s", event_types=["order_confirmation"])
        channel.register_webhook("https://all.example.com")

        assert len(channel.get_webhooks()) == 2
        urls = [r.url for r in channel.get_webhooks("order_confirmation")]
        assert urls == [URL, "https://all.example.com"]
        urls = [r.url for r in channel.get_webhooks("marketing")]
        assert urls == ["https://all.example.com"]

    def test_register_replaces_existing(self):
        channel = InMemoryWebhookChannel()
        channel.register_webhook(URL, secret="one")
        channel.register_webhook(URL, secret="two")

        webhooks = channel.get_webhooks()

        assert len(webhooks) == 1
        assert webhooks[0].secret == "two"

    def test_unregister(self):
        channel = InMemoryWebhookChannel()
        channel.register_webhook(URL)

        assert channel.unregister_webhook(URL) is True
        assert channel.unregister_webhook(URL) is False

    def test_blank_url_raises(self):
        with pytest.raises(ValidationError):
            InMemoryWebhookChannel().register_webhook("  ")


@pytest.mark.unit
class TestInMemoryWebhookChannel:
    """Tests for InMemoryWebhookChannel."""

    def test_send_records_payload(self, webhook_notification_factory):
        channel = InMemoryWebhookChannel()

        channel.send(webhook_notification_factory())

        assert channel.sent[0].url == URL
        assert channel.verify_delivery("req-1") == DeliveryStatus.DELIVERED

    def test_test_webhook_reports_success(self):
        result = InMemoryWebhookChannel().test_webhook(URL)

        assert result.success is True
        assert result.status_code == 200
        assert result.headers["Server"] == "InMemory"


@pytest.mark.unit
class TestHttpWebhookChannel:
    """Tests for HttpWebhookChannel with requests mocked."""

    @patch("notification_hub.channels.webhook.requests.request")
    def test_send_posts_signed_json(self, mock_request, webhook_notification_factory):
        mock_request.return_value = _response(200)
        channel = HttpWebhookChannel(timeout_seconds=5)
        notification = webhook_notification_factory(secret="topsecret")

        message_id = channel.send(notification)

        assert message_id == "req-1"
        args, kwargs = mock_request.call_args
        assert args == ("POST", URL)
        assert kwargs["timeout"] == 5
        assert json.loads(kwargs["data"]) == {"notification_id": "req-1"}
        assert kwargs["headers"]["X-Signature"] == sign_payload(
            kwargs["data"], "topsecret"
        )
        assert channel.verify_delivery("req-1") == DeliveryStatus.DELIVERED

    @patch("notification_hub.channels.webhook.requests.request")
    def test_send_without_secret_is_unsigned(
        self, mock_request, webhook_notification_factory
    ):
        mock_request.return_value = _response(204)

        HttpWebhookChannel().send(webhook_notification_factory())

        headers = mock_request.call_args.kwargs["headers"]
        assert "X-Signature" not in headers

    @patch("notification_hub.channels.webhook.requests.request")
    def test_non_2xx_raises_provider_error(
        self, mock_request, webhook_notification_factory
    ):
        mock_request.return_value = _response(503)
        channel = HttpWebhookChannel()

        with pytest.raises(ProviderError) as exc_info:
            channel.send(webhook_notification_factory())

        assert exc_info.value.status_code == 503
        assert channel.verify_delivery("req-1") == DeliveryStatus.FAILED

    @patch("notification_hub.channels.webhook.requests.request")
    def test_connection_error_raises_provider_error(
        self, mock_request, webhook_notification_factory
    ):
        mock_request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ProviderError, match="refused"):
            HttpWebhookChannel().send(webhook_notification_factory())

    @patch("notification_hub.channels.webhook.requests.post")
    def test_test_webhook_signs_with_registered_secret(self, mock_post):
        mock_post.return_value = _response(200, {"Server": "nginx"})
        channel = HttpWebhookChannel()
        channel.register_webhook(URL, secret="topsecret")

        result = channel.test_webhook(URL)

        assert result.success is True
        assert result.status_code == 200
        assert result.headers == {"Server": "nginx"}
        kwargs = mock_post.call_args.kwargs
        assert kwargs["headers"]["X-Signature"] == sign_payload(
            kwargs["data"], "topsecret"
        )

    @patch("notification_hub.channels.webhook.requests.post")
    def test_test_webhook_reports_failure(self, mock_post):
        mock_post.side_effect = requests.Timeout("timed out")

        result = HttpWebhookChannel().test_webhook(URL)

        assert result.success is False
        assert result.status_code is None
        assert "timed out" in result.error
