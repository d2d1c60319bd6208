"""Webhook channel providers.

Two implementations share the registration API:

- InMemoryWebhookChannel records payloads (development and tests)
- HttpWebhookChannel POSTs signed JSON with ``requests``

Payloads carrying a secret are signed with HMAC-SHA256 over the JSON
body; the hex digest goes in the notification's ``signature_header``.
"""

import hashlib
import hmac
import json
import threading
import time
from abc import abstractmethod
from typing import Dict, List, Optional

import requests
import structlog

from notification_hub.channels.base import ChannelProvider, InMemoryDeliveryTracker
from notification_hub.channels.models import (
    WebhookNotification,
    WebhookRegistration,
    WebhookTestResult,
)
from notification_hub.errors import ProviderError, ValidationError
from notification_hub.models import DeliveryStatus, NotificationChannel

logger = structlog.get_logger()


def sign_payload(body: str, secret: str) -> str:
    """HMAC-SHA256 hex digest of ``body`` keyed with ``secret``."""
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()


def _require_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise ValidationError("Webhook URL is required")
    return url.strip()


class WebhookChannel(ChannelProvider):
    """Base for webhook providers: registration bookkeeping and delivery status."""

    def __init__(self) -> None:
        self.tracker = InMemoryDeliveryTracker()
        self._registrations: Dict[str, WebhookRegistration] = {}
        self._registry_lock = threading.Lock()

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.WEBHOOK

    def register_webhook(
        self,
        url: str,
        secret: Optional[str] = None,
        event_types: Optional[List[str]] = None,
    ) -> WebhookRegistration:
        """Register (or replace) a webhook endpoint.

        Raises:
            ValidationError: If the URL is blank.
        """
        registration = WebhookRegistration(
            url=_require_url(url), secret=secret, event_types=list(event_types or [])
        )
        with self._registry_lock:
            self._registrations[registration.url] = registration
        logger.info(
            "webhook_registered",
            url=registration.url,
            event_types=registration.event_types,
        )
        return registration

    def unregister_webhook(self, url: str) -> bool:
        """Remove a registered webhook. Returns False if it was not registered."""
        url = _require_url(url)
        with self._registry_lock:
            removed = self._registrations.pop(url, None)
        if removed is not None:
            logger.info("webhook_unregistered", url=url)
        return removed is not None

    def get_webhooks(self, event_type: Optional[str] = None) -> List[WebhookRegistration]:
        """Registered webhooks, optionally only those subscribed to ``event_type``.

        A registration with no event types receives every event.
        """
        with self._registry_lock:
            registrations = list(self._registrations.values())
        if event_type is None:
            return registrations
        return [
            r for r in registrations if not r.event_types or event_type in r.event_types
        ]

    @abstractmethod
    def test_webhook(self, url: str) -> WebhookTestResult:
        """Call an endpoint and report status, latency and headers."""
        pass

    def verify_delivery(self, notification_id: str) -> DeliveryStatus:
        return self.tracker.verify_delivery(notification_id)

    def is_healthy(self) -> bool:
        return self.tracker.is_healthy()


class InMemoryWebhookChannel(WebhookChannel):
    """Webhook provider that records payloads instead of posting them."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: List[WebhookNotification] = []
        self._lock = threading.Lock()

    def send(self, notification: WebhookNotification) -> Optional[str]:
        _require_url(notification.url)
        with self._lock:
            self.sent.append(notification)
        self.tracker.record(notification.notification_id, DeliveryStatus.SENT)
        logger.info(
            "webhook_recorded",
            notification_id=notification.notification_id,
            url=notification.url,
        )
        return notification.notification_id

    def test_webhook(self, url: str) -> WebhookTestResult:
        _require_url(url)
        started = time.monotonic()
        return WebhookTestResult(
            success=True,
            status_code=200,
            response_time_ms=(time.monotonic() - started) * 1000,
            headers={"Content-Type": "application/json", "Server": "InMemory"},
        )


class HttpWebhookChannel(WebhookChannel):
    """Webhook provider that POSTs JSON payloads over HTTP.

    Args:
        timeout_seconds: Per-request timeout passed to ``requests``
    """

    def __init__(self, timeout_seconds: int = 10):
        super().__init__()
        self.timeout_seconds = timeout_seconds

    def send(self, notification: WebhookNotification) -> Optional[str]:
        url = _require_url(notification.url)
        body = json.dumps(notification.payload, default=str)
        headers = {"Content-Type": "application/json"}
        if notification.secret:
            headers[notification.signature_header] = sign_payload(
                body, notification.secret
            )

        try:
            response = requests.request(
                notification.method,
                url,
                data=body,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            self.tracker.record(notification.notification_id, DeliveryStatus.FAILED)
            raise ProviderError(
                f"Webhook request failed: {e}", channel=self.channel.value
            ) from e

        if not response.ok:
            self.tracker.record(notification.notification_id, DeliveryStatus.FAILED)
            raise ProviderError(
                f"Webhook returned HTTP {response.status_code}",
                channel=self.channel.value,
                status_code=response.status_code,
            )

        # A 2xx response means the receiver accepted the payload
        self.tracker.record(notification.notification_id, DeliveryStatus.DELIVERED)
        logger.info(
            "webhook_delivered",
            notification_id=notification.notification_id,
            url=url,
            status_code=response.status_code,
        )
        return notification.notification_id

    def test_webhook(self, url: str) -> WebhookTestResult:
        url = _require_url(url)
        body = json.dumps({"event": "webhook.test", "timestamp": time.time()})
        with self._registry_lock:
            registration = self._registrations.get(url)
        headers = {"Content-Type": "application/json"}
        if registration is not None and registration.secret:
            headers["X-Signature"] = sign_payload(body, registration.secret)

        started = time.monotonic()
        try:
            response = requests.post(
                url, data=body, headers=headers, timeout=self.timeout_seconds
            )
        except requests.RequestException as e:
            logger.warning("webhook_test_failed", url=url, error=str(e))
            return WebhookTestResult(
                success=False,
                response_time_ms=(time.monotonic() - started) * 1000,
                error=str(e),
            )

        return WebhookTestResult(
            success=response.ok,
            status_code=response.status_code,
            response_time_ms=(time.monotonic() - started) * 1000,
            headers=dict(response.headers),
        )
