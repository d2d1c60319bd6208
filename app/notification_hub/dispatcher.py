"""Notification dispatcher with preference resolution and per-channel isolation.

Orchestrates delivery of one logical notification:
- Skips silently when notifications are disabled or the request expired
- Resolves the allowed channels from user preferences
- Renders content from a template or from the literal subject/message
- Fans out to one provider per channel, isolating failures
- Records a DeliveryOutcome per (request, channel)

Usage Example:
    from notification_hub import (
        NotificationDispatcher,
        NotificationRequest,
        NotificationChannel,
        NotificationType,
    )

    dispatcher = NotificationDispatcher(
        providers={NotificationChannel.EMAIL: email_channel},
        resolver=PreferenceResolver(preferences_store),
        renderer=TemplateRenderer(template_store),
        history=InMemoryDeliveryHistoryStore(),
        payload_builder=PayloadBuilder("noreply@example.com", "Example"),
    )

    result = dispatcher.send(
        NotificationRequest(
            user_id="user-1",
            notification_type=NotificationType.WELCOME,
            channels=[NotificationChannel.EMAIL],
            template_key="welcome",
            data={"user": {"first_name": "John"}},
        )
    )
    logger.info("sent", delivered=result.delivered_channels)
"""

import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from notification_hub.channels.base import ChannelProvider
from notification_hub.channels.payloads import PayloadBuilder
from notification_hub.contacts import Contact, ContactDirectory, InMemoryContactDirectory
from notification_hub.errors import NotFoundError, ProviderError
from notification_hub.history import DeliveryHistoryStore
from notification_hub.logging import bind_request_context, get_module_logger
from notification_hub.models import (
    BulkDispatchResult,
    BulkNotificationRequest,
    DeliveryOutcome,
    DeliveryStatus,
    DispatchResult,
    DispatchState,
    NotificationChannel,
    NotificationRequest,
    RenderedContent,
    ScheduledNotificationRequest,
    SkipReason,
)
from notification_hub.operations import OperationResult
from notification_hub.preferences.resolver import PreferenceResolver
from notification_hub.scheduler import NotificationScheduler, TimerScheduler
from notification_hub.templates.renderer import TemplateRenderer

logger = get_module_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    """Multi-channel notification dispatcher.

    Each call is independent: the dispatcher holds no per-request state
    of its own, only its collaborators. Provider failures are caught per
    channel and recorded; they never propagate to the caller or stop the
    other channels.

    Attributes:
        providers: Dict mapping channel to its ChannelProvider
        resolver: PreferenceResolver deciding which channels are allowed
        renderer: TemplateRenderer producing per-channel content
        history: Store of delivery outcomes and submitted requests
        payload_builder: Builds channel payloads from rendered content
        contacts: Directory of recipient addresses
        scheduler: Runs future-dated requests
        enabled: Global feature flag; when False every send is skipped
        batch_size: Upper bound on users processed concurrently in bulk
        max_channel_workers: Upper bound on concurrent channel attempts
        max_retry_attempts: Attempts per channel before retry() refuses
    """

    def __init__(
        self,
        providers: Dict[NotificationChannel, ChannelProvider],
        resolver: PreferenceResolver,
        renderer: TemplateRenderer,
        history: DeliveryHistoryStore,
        payload_builder: PayloadBuilder,
        contacts: Optional[ContactDirectory] = None,
        scheduler: Optional[NotificationScheduler] = None,
        enabled: bool = True,
        batch_size: int = 100,
        max_channel_workers: int = 5,
        max_retry_attempts: int = 3,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.providers = providers
        self.resolver = resolver
        self.renderer = renderer
        self.history = history
        self.payload_builder = payload_builder
        self.contacts = contacts or InMemoryContactDirectory()
        self.scheduler = scheduler or TimerScheduler()
        self.enabled = enabled
        self.batch_size = batch_size
        self.max_channel_workers = max_channel_workers
        self.max_retry_attempts = max_retry_attempts
        self._clock = clock or _utcnow

        logger.info(
            "initialized_notification_dispatcher",
            channels=[channel.value for channel in providers],
            enabled=enabled,
            batch_size=batch_size,
        )

    # Dispatch

    def send(
        self,
        request: NotificationRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> DispatchResult:
        """Dispatch one request to every allowed channel.

        Policy skips (disabled, expired, DND, quiet hours, all channels
        disabled) return a SKIPPED result. Provider failures are recorded
        as FAILED outcomes on their channel.

        Args:
            request: Notification to send
            cancel_event: When set, no further channel attempts are started.
                Attempts already running are not interrupted.

        Returns:
            DispatchResult with one outcome per attempted channel.

        Raises:
            TemplateNotFoundError: If the template key exists in no language.
        """
        with bind_request_context(
            correlation_id=request.correlation_id,
            user_id=request.user_id,
            request_id=request.request_id,
        ):
            now = self._clock()
            if not self.enabled:
                return self._skipped(request, SkipReason.DISABLED)
            if request.is_expired(now):
                return self._skipped(request, SkipReason.EXPIRED)

            result = self._process(request, request.channels, now, cancel_event)
            if result.state == DispatchState.COMPLETED:
                logger.info(
                    "notification_sent",
                    notification_type=request.notification_type.value,
                    priority=request.priority.value,
                    delivered=[c.value for c in result.delivered_channels],
                    failed=[c.value for c in result.failed_channels],
                )
            return result

    def send_bulk(
        self,
        bulk_request: BulkNotificationRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkDispatchResult:
        """Send the same notification to many users.

        Users are processed in chunks of ``min(bulk_request.batch_size,
        self.batch_size)``. Within a chunk every user is resolved,
        rendered and dispatched concurrently on a pool sized to the chunk.
        Each user is independent: a failure for one is logged and the
        bulk continues.
        """
        if not self.enabled:
            logger.info("bulk_notification_skipped", reason=SkipReason.DISABLED.value)
            return BulkDispatchResult()

        chunk_size = min(bulk_request.batch_size, self.batch_size)
        user_ids = list(bulk_request.user_ids)
        result = BulkDispatchResult()

        logger.info(
            "bulk_notification_started",
            user_count=len(user_ids),
            chunk_size=chunk_size,
            notification_type=bulk_request.notification_type.value,
        )

        for start in range(0, len(user_ids), chunk_size):
            if _is_cancelled(cancel_event):
                result.cancelled = True
                break
            self._send_chunk(
                bulk_request, user_ids[start : start + chunk_size], cancel_event, result
            )
            if result.cancelled:
                break

        logger.info(
            "bulk_notification_completed",
            user_count=len(user_ids),
            processed=result.total,
            skipped=result.skipped,
            failed_users=len(result.failed_user_ids),
            cancelled=result.cancelled,
        )
        return result

    def schedule(self, scheduled_request: ScheduledNotificationRequest) -> DispatchResult:
        """Send now if ``scheduled_at`` has passed, otherwise defer to the scheduler."""
        request = scheduled_request.request
        if scheduled_request.scheduled_at <= self._clock():
            return self.send(request)

        self.scheduler.schedule(
            request.request_id,
            scheduled_request.scheduled_at,
            lambda: self.send(request),
        )
        return DispatchResult(
            request_id=request.request_id, state=DispatchState.SCHEDULED
        )

    # Accessors

    def get_status(self, request_id: str) -> Dict[NotificationChannel, DeliveryStatus]:
        """Per-channel status of a request. Empty for unknown requests."""
        return {
            channel: outcome.status
            for channel, outcome in self.history.get_outcomes(request_id).items()
        }

    def get_channel_status(
        self, request_id: str, channel: NotificationChannel
    ) -> DeliveryStatus:
        outcome = self.history.get_outcome(request_id, channel)
        return outcome.status if outcome else DeliveryStatus.UNKNOWN

    def verify_delivery(self, request_id: str) -> Dict[NotificationChannel, DeliveryStatus]:
        """Ask providers for fresh status of every sent channel and record changes."""
        statuses = {}
        for channel, outcome in self.history.get_outcomes(request_id).items():
            provider = self.providers.get(channel)
            if outcome.status == DeliveryStatus.SENT and provider is not None:
                try:
                    status = provider.verify_delivery(request_id)
                except Exception as e:
                    logger.error(
                        "delivery_verification_failed",
                        channel=channel.value,
                        request_id=request_id,
                        error=str(e),
                        exc_info=True,
                    )
                    status = outcome.status
                if status not in (outcome.status, DeliveryStatus.UNKNOWN):
                    outcome.status = status
                    outcome.updated_at = self._clock()
                    self.history.record(outcome)
            statuses[channel] = outcome.status
        return statuses

    def get_history(self, user_id: str, limit: int = 50) -> List[DeliveryOutcome]:
        return self.history.get_history(user_id, limit)

    def cancel(self, request_id: str) -> OperationResult:
        """Cancel a request that is still waiting in the scheduler."""
        if self.scheduler.cancel(request_id):
            return OperationResult.success(message=f"Cancelled request {request_id}")

        if self.history.get_request(request_id) or self.history.get_outcomes(request_id):
            message = f"Request {request_id} was already dispatched"
        else:
            message = f"Request {request_id} is not pending"
        return OperationResult.permanent_error(message, error_code="NOT_CANCELLABLE")

    def retry(self, request_id: str) -> OperationResult:
        """Re-dispatch the failed channels of a request.

        Successful channels are left untouched. Preferences are resolved
        again, so a user who has since turned on do-not-disturb is not
        contacted.
        """
        request = self.history.get_request(request_id)
        if request is None:
            return OperationResult.permanent_error(
                f"Request {request_id} not found", error_code="NOT_RETRYABLE"
            )

        outcomes = self.history.get_outcomes(request_id)
        failed = [c for c, o in outcomes.items() if o.status == DeliveryStatus.FAILED]
        if not failed:
            return OperationResult.permanent_error(
                f"Request {request_id} has no failed channels",
                error_code="NOT_RETRYABLE",
            )

        retryable = [c for c in failed if outcomes[c].attempts < self.max_retry_attempts]
        if not retryable:
            return OperationResult.permanent_error(
                f"Request {request_id} reached {self.max_retry_attempts} attempts",
                error_code="NOT_RETRYABLE",
            )

        now = self._clock()
        if not self.enabled:
            return OperationResult.transient_error(
                "Notifications are disabled", error_code="DISABLED"
            )
        if request.is_expired(now):
            return OperationResult.permanent_error(
                f"Request {request_id} has expired", error_code="NOT_RETRYABLE"
            )

        with bind_request_context(
            correlation_id=request.correlation_id,
            user_id=request.user_id,
            request_id=request.request_id,
        ):
            try:
                result = self._process(request, retryable, now, None, outcomes)
            except NotFoundError as e:
                return OperationResult.permanent_error(
                    str(e), error_code="TEMPLATE_NOT_FOUND"
                )

            if result.state == DispatchState.SKIPPED:
                return OperationResult.transient_error(
                    f"Retry skipped: {result.skip_reason.value}",
                    error_code="SKIPPED",
                )

            logger.info(
                "notification_retried",
                channels=[c.value for c in retryable],
                delivered=[c.value for c in result.delivered_channels],
            )
            if result.failed_channels:
                return OperationResult.transient_error(
                    f"Retry failed on {[c.value for c in result.failed_channels]}",
                    error_code="RETRY_FAILED",
                )
            return OperationResult.success(data=result, message="Retried")

    def health_check(self) -> Dict[str, bool]:
        """Health of every provider; a provider that raises is unhealthy."""
        health_status = {}
        for channel, provider in self.providers.items():
            try:
                health_status[channel.value] = bool(provider.is_healthy())
            except Exception as e:
                logger.error(
                    "channel_health_check_failed",
                    channel=channel.value,
                    error=str(e),
                    exc_info=True,
                )
                health_status[channel.value] = False
        return health_status

    # Internals

    def _process(
        self,
        request: NotificationRequest,
        channels: Iterable[NotificationChannel],
        now: datetime,
        cancel_event: Optional[threading.Event],
        previous: Optional[Dict[NotificationChannel, DeliveryOutcome]] = None,
    ) -> DispatchResult:
        """Resolve, render and dispatch ``request`` on ``channels``."""
        resolution = self.resolver.resolve(
            request.user_id,
            request.notification_type,
            channels,
            request.priority,
            now,
        )
        if resolution.is_skipped:
            return self._skipped(request, resolution.skip_reason)

        content = self._render(request, resolution.language)
        self.history.remember_request(request)
        contact = self._get_contact(request.user_id)

        outcomes = self._dispatch_channels(
            request,
            content,
            contact,
            resolution.allowed_channels,
            now,
            cancel_event,
            previous or {},
        )
        return DispatchResult(
            request_id=request.request_id,
            state=DispatchState.COMPLETED,
            outcomes=outcomes,
        )

    def _render(self, request: NotificationRequest, language: str) -> RenderedContent:
        if request.template_key:
            return self.renderer.render(request.template_key, request.data, language)
        return RenderedContent.from_literal(request.subject, request.message, request.data)

    def _get_contact(self, user_id: str) -> Contact:
        try:
            return self.contacts.get_contact(user_id)
        except Exception as e:
            logger.error(
                "contact_lookup_failed", user_id=user_id, error=str(e), exc_info=True
            )
            return Contact(user_id=user_id)

    def _dispatch_channels(
        self,
        request: NotificationRequest,
        content: RenderedContent,
        contact: Contact,
        channels: Iterable[NotificationChannel],
        now: datetime,
        cancel_event: Optional[threading.Event],
        previous: Dict[NotificationChannel, DeliveryOutcome],
    ) -> Dict[NotificationChannel, DeliveryOutcome]:
        """Attempt every channel concurrently, one worker per channel."""
        channels = list(channels)
        outcomes: Dict[NotificationChannel, DeliveryOutcome] = {}
        workers = max(1, min(len(channels), self.max_channel_workers))

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="notification-channel"
        ) as executor:
            futures = []
            for channel in channels:
                if _is_cancelled(cancel_event):
                    logger.info("channel_dispatch_cancelled", channel=channel.value)
                    break
                # Each worker gets its own copy so log context follows the attempt
                context = contextvars.copy_context()
                futures.append(
                    executor.submit(
                        context.run,
                        self._attempt,
                        channel,
                        request,
                        content,
                        contact,
                        now,
                        cancel_event,
                        previous.get(channel),
                    )
                )

            for future in as_completed(futures):
                outcome = future.result()
                if outcome is not None:
                    outcomes[outcome.channel] = outcome

        return outcomes

    def _attempt(
        self,
        channel: NotificationChannel,
        request: NotificationRequest,
        content: RenderedContent,
        contact: Contact,
        now: datetime,
        cancel_event: Optional[threading.Event],
        previous: Optional[DeliveryOutcome],
    ) -> Optional[DeliveryOutcome]:
        """Send on one channel and record the outcome. Never raises."""
        if _is_cancelled(cancel_event):
            logger.info("channel_dispatch_cancelled", channel=channel.value)
            return None

        status = DeliveryStatus.SENT
        error = None
        message_id = None
        try:
            provider = self.providers.get(channel)
            if provider is None:
                raise ProviderError(
                    f"No provider registered for channel {channel.value}",
                    channel=channel.value,
                )
            payload = self.payload_builder.build(channel, request, content, contact, now)
            message_id = provider.send(payload)
        except Exception as e:
            logger.error(
                "channel_exception",
                channel=channel.value,
                error=str(e),
                exc_info=True,
            )
            status = DeliveryStatus.FAILED
            error = str(e)

        outcome = DeliveryOutcome(
            request_id=request.request_id,
            user_id=request.user_id,
            channel=channel,
            notification_type=request.notification_type,
            status=status,
            error=error,
            provider_message_id=message_id,
            attempts=previous.attempts + 1 if previous else 1,
            created_at=previous.created_at if previous else now,
            updated_at=self._clock(),
        )
        try:
            self.history.record(outcome)
        except Exception as e:
            logger.error(
                "delivery_outcome_record_failed",
                channel=channel.value,
                status=status.value,
                error=str(e),
                exc_info=True,
            )
        return outcome

    def _send_chunk(
        self,
        bulk_request: BulkNotificationRequest,
        user_ids: List[str],
        cancel_event: Optional[threading.Event],
        result: BulkDispatchResult,
    ) -> None:
        with ThreadPoolExecutor(
            max_workers=len(user_ids), thread_name_prefix="notification-bulk"
        ) as executor:
            submitted = []
            for user_id in user_ids:
                if _is_cancelled(cancel_event):
                    result.cancelled = True
                    break
                request = bulk_request.for_user(user_id)
                context = contextvars.copy_context()
                submitted.append(
                    (user_id, executor.submit(context.run, self.send, request, cancel_event))
                )

            for user_id, future in submitted:
                try:
                    result.results.append(future.result())
                except Exception as e:
                    logger.error(
                        "bulk_user_dispatch_failed",
                        user_id=user_id,
                        error=str(e),
                        exc_info=True,
                    )
                    result.failed_user_ids.append(user_id)

    def _skipped(self, request: NotificationRequest, reason: SkipReason) -> DispatchResult:
        logger.info(
            "notification_skipped",
            reason=reason.value,
            notification_type=request.notification_type.value,
        )
        return DispatchResult(
            request_id=request.request_id,
            state=DispatchState.SKIPPED,
            skip_reason=reason,
        )


def _is_cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()
