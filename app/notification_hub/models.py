"""Shared contracts for the notification hub.

Enumerations, request types and delivery outcome records passed between
the dispatcher, the preference resolver, the template renderer and the
channel providers.

Uses Pydantic BaseModel for:
- Request-shape validation at construction time (before any dispatch)
- Immutability of submitted requests (frozen models)
- Consistent serialization of outcomes for history and export
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notification_hub.errors import InvalidChannelError


class NotificationChannel(str, Enum):
    """Delivery mechanisms supported by the hub."""

    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    IN_APP = "in_app"
    WEBHOOK = "webhook"


class NotificationPriority(str, Enum):
    """Notification priority levels.

    CRITICAL is the only priority that bypasses do-not-disturb and
    quiet hours.
    """

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationType(str, Enum):
    """Business category of a notification, used for per-type preferences."""

    WELCOME = "welcome"
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    ORDER_CONFIRMATION = "order_confirmation"
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_FAILED = "payment_failed"
    SECURITY_ALERT = "security_alert"
    SYSTEM_MAINTENANCE = "system_maintenance"
    ACCOUNT_UPDATE = "account_update"
    REMINDER = "reminder"
    MARKETING = "marketing"
    GENERAL = "general"


class DeliveryStatus(str, Enum):
    """Per-channel delivery status."""

    QUEUED = "queued"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    UNKNOWN = "unknown"


class SkipReason(str, Enum):
    """Why a request was not dispatched. Skips are not errors."""

    DISABLED = "disabled"
    EXPIRED = "expired"
    DND = "dnd"
    QUIET_HOURS = "quiet_hours"
    ALL_CHANNELS_DISABLED = "all_channels_disabled"


def parse_channel(value: object) -> "NotificationChannel":
    """Coerce a raw value into a NotificationChannel.

    Raises:
        InvalidChannelError: If the value names no known channel.
    """
    try:
        return NotificationChannel(value)
    except ValueError as e:
        raise InvalidChannelError(value) from e


class DispatchState(str, Enum):
    """Terminal state of a dispatch call."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    SCHEDULED = "scheduled"


def _require_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"{field_name} cannot be blank")
    return value


class NotificationRequest(BaseModel):
    """A single logical notification for one user.

    Frozen once built. Channels are de-duplicated keeping first-seen order.
    When ``template_key`` is omitted the literal ``subject`` and
    ``message`` are used for every channel.

    Attributes:
        request_id: Unique id, generated when omitted
        user_id: Target user
        notification_type: Category used for per-type preference overrides
        channels: Requested channels in order of preference
        priority: CRITICAL bypasses do-not-disturb and quiet hours
        template_key: Optional template to render
        data: Substitution data for the template
        subject: Literal subject (literal path only)
        message: Literal body (literal path only)
        expires_at: Requests past this instant are silently skipped
        correlation_id: Caller trace id, bound to every log line
        metadata: Free-form caller context

    Example:
        request = NotificationRequest(
            user_id="user-1",
            notification_type=NotificationType.WELCOME,
            channels=[NotificationChannel.EMAIL, NotificationChannel.SMS],
            template_key="welcome",
            data={"user": {"first_name": "John"}},
        )
    """

    model_config = ConfigDict(frozen=True)

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    notification_type: NotificationType = NotificationType.GENERAL
    channels: Tuple[NotificationChannel, ...] = Field(default_factory=tuple)
    priority: NotificationPriority = NotificationPriority.NORMAL
    template_key: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    subject: Optional[str] = None
    message: Optional[str] = None
    expires_at: Optional[datetime] = None
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        return _require_text(v, "user_id")

    @field_validator("template_key")
    @classmethod
    def validate_template_key(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v, "template_key")

    @field_validator("channels")
    @classmethod
    def dedupe_channels(
        cls, v: Tuple[NotificationChannel, ...]
    ) -> Tuple[NotificationChannel, ...]:
        return tuple(dict.fromkeys(v))

    @field_validator("expires_at")
    @classmethod
    def ensure_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v) if v is not None else None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= now


class BulkNotificationRequest(BaseModel):
    """The same notification addressed to many users.

    ``user_ids`` has set semantics: duplicates collapse, first-seen order
    is kept. ``batch_size`` only bounds how many users are processed
    concurrently in one wave.
    """

    model_config = ConfigDict(frozen=True)

    user_ids: Tuple[str, ...] = Field(..., min_length=1)
    notification_type: NotificationType = NotificationType.GENERAL
    channels: Tuple[NotificationChannel, ...] = Field(default_factory=tuple)
    priority: NotificationPriority = NotificationPriority.NORMAL
    template_key: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    subject: Optional[str] = None
    message: Optional[str] = None
    expires_at: Optional[datetime] = None
    correlation_id: Optional[str] = None
    batch_size: int = Field(default=100, gt=0)

    @field_validator("user_ids")
    @classmethod
    def dedupe_user_ids(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for user_id in v:
            _require_text(user_id, "user_id")
        return tuple(dict.fromkeys(v))

    @field_validator("template_key")
    @classmethod
    def validate_template_key(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v, "template_key")

    @field_validator("channels")
    @classmethod
    def dedupe_channels(
        cls, v: Tuple[NotificationChannel, ...]
    ) -> Tuple[NotificationChannel, ...]:
        return tuple(dict.fromkeys(v))

    @field_validator("expires_at")
    @classmethod
    def ensure_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v) if v is not None else None

    def for_user(self, user_id: str) -> NotificationRequest:
        """Build the per-user request dispatched by a bulk send."""
        return NotificationRequest(
            user_id=user_id,
            notification_type=self.notification_type,
            channels=self.channels,
            priority=self.priority,
            template_key=self.template_key,
            data=self.data,
            subject=self.subject,
            message=self.message,
            expires_at=self.expires_at,
            correlation_id=self.correlation_id,
        )


class ScheduledNotificationRequest(BaseModel):
    """A request to dispatch at ``scheduled_at`` (naive values are UTC)."""

    model_config = ConfigDict(frozen=True)

    request: NotificationRequest
    scheduled_at: datetime

    @field_validator("scheduled_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        return _as_utc(v)


class RenderedContent(BaseModel):
    """Per-channel content produced for one request.

    Attributes:
        subject: Email subject
        html: Email HTML body
        text: Plain text body (email text part, in-app content)
        sms: SMS body
        push_title: Push notification title
        push_body: Push notification body
        template_key: Template used, None for literal content
        language: Language of the template actually used
        data: Substitution data
        rendered_at: When rendering happened
    """

    subject: str = ""
    html: str = ""
    text: str = ""
    sms: str = ""
    push_title: str = ""
    push_body: str = ""
    template_key: Optional[str] = None
    language: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    rendered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_literal(
        cls,
        subject: Optional[str],
        message: Optional[str],
        data: Optional[Dict[str, Any]] = None,
    ) -> "RenderedContent":
        """Duplicate a literal subject and message into every channel field."""
        title = subject or "Notification"
        body = message or "Notification"
        return cls(
            subject=title,
            html=body,
            text=body,
            sms=body,
            push_title=title,
            push_body=body,
            data=dict(data or {}),
        )


class DeliveryOutcome(BaseModel):
    """Recorded result of dispatching one request on one channel."""

    request_id: str
    user_id: str
    channel: NotificationChannel
    notification_type: NotificationType
    status: DeliveryStatus
    error: Optional[str] = None
    provider_message_id: Optional[str] = None
    attempts: int = 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_success(self) -> bool:
        return self.status in (DeliveryStatus.SENT, DeliveryStatus.DELIVERED)


class DispatchResult(BaseModel):
    """Result of one send or schedule call.

    ``outcomes`` holds one entry per attempted channel; a skipped request
    has none and carries ``skip_reason`` instead.
    """

    request_id: str
    state: DispatchState
    skip_reason: Optional[SkipReason] = None
    outcomes: Dict[NotificationChannel, DeliveryOutcome] = Field(default_factory=dict)

    @property
    def delivered_channels(self) -> List[NotificationChannel]:
        return [
            channel for channel, outcome in self.outcomes.items() if outcome.is_success
        ]

    @property
    def failed_channels(self) -> List[NotificationChannel]:
        return [
            channel
            for channel, outcome in self.outcomes.items()
            if outcome.status == DeliveryStatus.FAILED
        ]


class BulkDispatchResult(BaseModel):
    """Per-user results of a bulk send, in user order."""

    results: List[DispatchResult] = Field(default_factory=list)
    failed_user_ids: List[str] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.state == DispatchState.SKIPPED)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
