"""Notification service for dependency injection.

Provides a class-based interface to the notification hub that wires the
dispatcher and its default collaborators from Settings.
"""

import threading
from typing import Dict, List, Optional, TYPE_CHECKING

from notification_hub.channels import (
    ChannelProvider,
    HttpWebhookChannel,
    InMemoryEmailChannel,
    InMemoryInAppChannel,
    InMemoryPushChannel,
    InMemorySmsChannel,
    InMemoryWebhookChannel,
    PayloadBuilder,
    WebhookChannel,
)
from notification_hub.contacts import ContactDirectory, InMemoryContactDirectory
from notification_hub.dispatcher import NotificationDispatcher
from notification_hub.history import InMemoryDeliveryHistoryStore
from notification_hub.logging import get_module_logger
from notification_hub.models import (
    BulkDispatchResult,
    BulkNotificationRequest,
    DeliveryOutcome,
    DeliveryStatus,
    DispatchResult,
    NotificationChannel,
    NotificationRequest,
    ScheduledNotificationRequest,
)
from notification_hub.operations import OperationResult
from notification_hub.preferences import (
    InMemoryPreferencesStore,
    PreferenceResolver,
    PreferencesStore,
)
from notification_hub.scheduler import TimerScheduler
from notification_hub.templates import (
    InMemoryTemplateStore,
    TemplateRenderer,
    TemplateStore,
    YAMLTemplateLoader,
)

if TYPE_CHECKING:
    from notification_hub.configuration import Settings

logger = get_module_logger()


class NotificationService:
    """Class-based notification service.

    This is a thin facade: all dispatch work is delegated to the
    underlying NotificationDispatcher instance. Collaborators not passed
    in are created in memory from settings, and the packaged YAML
    templates (or ``TEMPLATE_DIRECTORY``) are loaded into the template
    store.

    Usage:
        # Via the provider
        from notification_hub.services import get_notification_service

        service = get_notification_service()
        result = service.send(request)

        # Direct instantiation
        from notification_hub.services import get_settings

        service = NotificationService(get_settings())
        service.preferences.set_do_not_disturb("user-1", True)
    """

    def __init__(
        self,
        settings: "Settings",
        providers: Optional[Dict[NotificationChannel, ChannelProvider]] = None,
        preferences: Optional[PreferencesStore] = None,
        templates: Optional[TemplateStore] = None,
        contacts: Optional[ContactDirectory] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        """Initialize notification service.

        Args:
            settings: Settings instance (required, passed from provider).
            providers: Optional dict of channel to ChannelProvider. Defaults
                to the in-memory providers configured from settings.
            preferences: Optional preferences store (default: in memory).
            templates: Optional template store. When omitted an in-memory
                store is created and the YAML templates are loaded into it.
            contacts: Optional contact directory (default: in memory).
            dispatcher: Optional pre-configured NotificationDispatcher.
                When given, the other collaborators are taken from it.
        """
        self._settings = settings

        if dispatcher is None:
            if preferences is None:
                preferences = InMemoryPreferencesStore()

            if templates is None:
                templates = InMemoryTemplateStore()
                loaded = YAMLTemplateLoader(settings.templates.TEMPLATE_DIRECTORY).load_into(
                    templates
                )
                logger.info("default_templates_loaded", count=loaded)

            if providers is None:
                providers = {
                    NotificationChannel.EMAIL: InMemoryEmailChannel(),
                    NotificationChannel.SMS: InMemorySmsChannel(
                        max_message_length=settings.sms.SMS_MAX_MESSAGE_LENGTH
                    ),
                    NotificationChannel.PUSH: InMemoryPushChannel(
                        min_token_length=settings.push.PUSH_MIN_TOKEN_LENGTH
                    ),
                    NotificationChannel.IN_APP: InMemoryInAppChannel(
                        max_per_user=settings.in_app.IN_APP_MAX_PER_USER
                    ),
                    NotificationChannel.WEBHOOK: _build_webhook_channel(settings),
                }

            dispatcher = NotificationDispatcher(
                providers=providers,
                resolver=PreferenceResolver(preferences),
                renderer=TemplateRenderer(
                    templates,
                    default_language=settings.templates.TEMPLATE_DEFAULT_LANGUAGE,
                ),
                history=InMemoryDeliveryHistoryStore(
                    max_requests_per_user=settings.delivery.DELIVERY_HISTORY_LIMIT
                ),
                payload_builder=PayloadBuilder(
                    from_email=settings.email.EMAIL_FROM_ADDRESS,
                    from_name=settings.email.EMAIL_FROM_NAME,
                    in_app_expiry_days=settings.in_app.IN_APP_DEFAULT_EXPIRY_DAYS,
                    webhook_default_url=settings.webhook.WEBHOOK_DEFAULT_URL,
                    webhook_secret=settings.webhook.WEBHOOK_SECRET,
                ),
                contacts=contacts or InMemoryContactDirectory(),
                scheduler=TimerScheduler(),
                enabled=settings.general.NOTIFICATIONS_ENABLED,
                batch_size=settings.delivery.DELIVERY_BATCH_SIZE,
                max_channel_workers=settings.delivery.DELIVERY_MAX_CHANNEL_WORKERS,
                max_retry_attempts=settings.delivery.DELIVERY_MAX_RETRY_ATTEMPTS,
            )

        self._dispatcher = dispatcher

    def send(
        self,
        request: NotificationRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> DispatchResult:
        """Send one notification to every channel the user allows.

        Raises:
            TemplateNotFoundError: If the request's template does not exist.
        """
        return self._dispatcher.send(request, cancel_event)

    def send_bulk(
        self,
        bulk_request: BulkNotificationRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkDispatchResult:
        return self._dispatcher.send_bulk(bulk_request, cancel_event)

    def schedule(self, scheduled_request: ScheduledNotificationRequest) -> DispatchResult:
        return self._dispatcher.schedule(scheduled_request)

    def get_status(self, request_id: str) -> Dict[NotificationChannel, DeliveryStatus]:
        return self._dispatcher.get_status(request_id)

    def get_history(self, user_id: str, limit: int = 50) -> List[DeliveryOutcome]:
        return self._dispatcher.get_history(user_id, limit)

    def cancel(self, request_id: str) -> OperationResult:
        return self._dispatcher.cancel(request_id)

    def retry(self, request_id: str) -> OperationResult:
        return self._dispatcher.retry(request_id)

    def health_check(self) -> Dict[str, bool]:
        return self._dispatcher.health_check()

    @property
    def preferences(self) -> PreferencesStore:
        """The preference store behind the resolver."""
        return self._dispatcher.resolver.store

    @property
    def renderer(self) -> TemplateRenderer:
        return self._dispatcher.renderer

    @property
    def dispatcher(self) -> NotificationDispatcher:
        """Access underlying NotificationDispatcher instance.

        Provided for advanced use cases that need direct access
        to the NotificationDispatcher API.
        """
        return self._dispatcher

    def get_provider(self, channel: NotificationChannel) -> Optional[ChannelProvider]:
        return self._dispatcher.providers.get(channel)


def _build_webhook_channel(settings: "Settings") -> WebhookChannel:
    if settings.webhook.WEBHOOK_HTTP_ENABLED:
        return HttpWebhookChannel(
            timeout_seconds=settings.webhook.WEBHOOK_TIMEOUT_SECONDS
        )
    return InMemoryWebhookChannel()
