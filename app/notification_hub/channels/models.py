"""Channel-specific notification payloads.

The dispatcher renders content once per request and then builds one of
these payloads for each allowed channel. ``notification_id`` is the
request id, so delivery can be verified per (request, channel).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from notification_hub.models import DeliveryStatus


class InAppNotificationType(str, Enum):
    """Visual severity of an in-app notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class EmailNotification(BaseModel):
    notification_id: str
    to_email: Optional[EmailStr] = None
    to_name: Optional[str] = None
    from_email: str
    from_name: str
    subject: str
    html_body: str = ""
    text_body: str = ""


class SmsNotification(BaseModel):
    notification_id: str
    phone_number: Optional[str] = None
    message: str


class PushNotification(BaseModel):
    """Push payload addressed to device tokens or to a topic."""

    notification_id: str
    device_tokens: List[str] = Field(default_factory=list)
    topic: Optional[str] = None
    title: str
    body: str
    data: Dict[str, Any] = Field(default_factory=dict)


class InAppNotification(BaseModel):
    """An entry in a user's in-app inbox."""

    notification_id: str
    user_id: str
    title: str
    content: str
    type: InAppNotificationType = InAppNotificationType.INFO
    action_url: Optional[str] = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    read_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class WebhookNotification(BaseModel):
    notification_id: str
    url: str
    method: str = "POST"
    payload: Dict[str, Any] = Field(default_factory=dict)
    secret: Optional[str] = None
    signature_header: str = "X-Signature"


class WebhookRegistration(BaseModel):
    url: str
    secret: Optional[str] = None
    event_types: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WebhookTestResult(BaseModel):
    """Result of probing a webhook endpoint."""

    success: bool
    status_code: Optional[int] = None
    response_time_ms: float = 0.0
    headers: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


class PhoneNumberValidation(BaseModel):
    phone_number: str
    is_valid: bool
    formatted: Optional[str] = None
    error: Optional[str] = None


class SmsDeliveryReport(BaseModel):
    notification_id: str
    phone_number: Optional[str] = None
    status: DeliveryStatus
    error: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
