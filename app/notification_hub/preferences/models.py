"""User preference models.

Preferences are layered: five global channel toggles, and above them an
optional per-notification-type override for each channel. ``None`` in an
override means "inherit the global toggle".
"""

from datetime import time
from typing import Dict, Optional

from pydantic import BaseModel, Field

from notification_hub.models import NotificationChannel, NotificationType

# Field name of the global toggle (and type override) for each channel
CHANNEL_FIELDS: Dict[NotificationChannel, str] = {
    NotificationChannel.EMAIL: "email_enabled",
    NotificationChannel.SMS: "sms_enabled",
    NotificationChannel.PUSH: "push_enabled",
    NotificationChannel.IN_APP: "in_app_enabled",
    NotificationChannel.WEBHOOK: "webhook_enabled",
}


class NotificationTypePreference(BaseModel):
    """Per-type channel overrides for one user.

    Attributes:
        email_enabled: Override for email, None to inherit
        sms_enabled: Override for SMS, None to inherit
        push_enabled: Override for push, None to inherit
        in_app_enabled: Override for in-app, None to inherit
        webhook_enabled: Override for webhook, None to inherit
    """

    email_enabled: Optional[bool] = None
    sms_enabled: Optional[bool] = None
    push_enabled: Optional[bool] = None
    in_app_enabled: Optional[bool] = None
    webhook_enabled: Optional[bool] = None

    def get(self, channel: NotificationChannel) -> Optional[bool]:
        return getattr(self, CHANNEL_FIELDS[channel])

    def set(self, channel: NotificationChannel, enabled: Optional[bool]) -> None:
        setattr(self, CHANNEL_FIELDS[channel], enabled)


class UserNotificationPreferences(BaseModel):
    """Notification preferences for one user.

    Created with these defaults the first time a user is referenced:
    every channel enabled except webhook, do-not-disturb off, no quiet
    hours, language en-US and timezone UTC.

    Example:
        prefs = UserNotificationPreferences(user_id="user-1")
        prefs.is_channel_enabled(NotificationType.WELCOME, NotificationChannel.EMAIL)
        # True
    """

    user_id: str
    email_enabled: bool = True
    sms_enabled: bool = True
    push_enabled: bool = True
    in_app_enabled: bool = True
    webhook_enabled: bool = False
    do_not_disturb: bool = False
    quiet_hours_start: Optional[time] = None
    quiet_hours_end: Optional[time] = None
    language: str = "en-US"
    timezone: str = "UTC"
    type_preferences: Dict[NotificationType, NotificationTypePreference] = Field(
        default_factory=dict
    )

    @property
    def has_quiet_hours(self) -> bool:
        return self.quiet_hours_start is not None and self.quiet_hours_end is not None

    def global_enabled(self, channel: NotificationChannel) -> bool:
        return getattr(self, CHANNEL_FIELDS[channel])

    def set_global_enabled(self, channel: NotificationChannel, enabled: bool) -> None:
        setattr(self, CHANNEL_FIELDS[channel], enabled)

    def is_channel_enabled(
        self, notification_type: NotificationType, channel: NotificationChannel
    ) -> bool:
        """Effective state of a channel for a type: override, else global toggle."""
        type_preference = self.type_preferences.get(notification_type)
        if type_preference is not None:
            override = type_preference.get(channel)
            if override is not None:
                return override
        return self.global_enabled(channel)


class PreferenceStatistics(BaseModel):
    """Aggregate view over all stored preference records."""

    total_users: int = 0
    by_language: Dict[str, int] = Field(default_factory=dict)
    by_timezone: Dict[str, int] = Field(default_factory=dict)
    do_not_disturb_users: int = 0
    quiet_hours_users: int = 0
    opt_out_counts: Dict[NotificationChannel, int] = Field(default_factory=dict)
