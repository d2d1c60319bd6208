"""Preference resolution.

Combines a user's do-not-disturb flag, quiet hours, global channel
toggles and per-type overrides into the set of channels a request may
use right now.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from notification_hub.logging import get_module_logger
from notification_hub.models import (
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    SkipReason,
    parse_channel,
)
from notification_hub.preferences.store import PreferencesStore
from notification_hub.quiet_hours import is_quiet_now, to_user_time

logger = get_module_logger()


class ResolutionResult(BaseModel):
    """Either the allowed channels or the reason nothing may be sent.

    Attributes:
        allowed_channels: Channels permitted, in requested order
        skip_reason: Set when allowed_channels is empty
        language: User's preferred language, used for rendering
    """

    model_config = ConfigDict(frozen=True)

    allowed_channels: Tuple[NotificationChannel, ...] = ()
    skip_reason: Optional[SkipReason] = None
    language: str = "en-US"

    @property
    def is_skipped(self) -> bool:
        return self.skip_reason is not None


class PreferenceResolver:
    """Resolves the channels allowed for a user and notification type.

    Resolution never writes to the store other than the lazy creation of
    a default record by ``PreferencesStore.get``.

    Example:
        resolver = PreferenceResolver(InMemoryPreferencesStore())
        result = resolver.resolve(
            "user-1",
            NotificationType.WELCOME,
            [NotificationChannel.EMAIL, NotificationChannel.SMS],
            NotificationPriority.NORMAL,
        )
        if result.is_skipped:
            logger.info("skipped", reason=result.skip_reason)
    """

    def __init__(self, store: PreferencesStore):
        self.store = store

    def resolve(
        self,
        user_id: str,
        notification_type: NotificationType,
        requested_channels: Iterable[NotificationChannel],
        priority: NotificationPriority,
        now: Optional[datetime] = None,
    ) -> ResolutionResult:
        """Resolve the allowed channels, short-circuiting in order.

        1. do-not-disturb (unless CRITICAL)
        2. quiet hours in the user's timezone (unless CRITICAL)
        3. per-channel type override, else global toggle

        Args:
            user_id: Target user
            notification_type: Category of the notification
            requested_channels: Channels asked for; duplicates are ignored
            priority: CRITICAL bypasses steps 1 and 2
            now: Evaluation instant (default: current UTC time)

        Returns:
            ResolutionResult with allowed channels or a skip reason.

        Raises:
            InvalidChannelError: If a requested channel is not a known channel.
        """
        channels = _normalize_channels(requested_channels)
        now = now or datetime.now(timezone.utc)
        preferences = self.store.get(user_id)
        is_critical = priority == NotificationPriority.CRITICAL

        if preferences.do_not_disturb and not is_critical:
            return self._skip(user_id, SkipReason.DND, preferences.language)

        if preferences.has_quiet_hours and not is_critical:
            local_now = to_user_time(now, preferences.timezone)
            if is_quiet_now(
                preferences.quiet_hours_start, preferences.quiet_hours_end, local_now
            ):
                return self._skip(user_id, SkipReason.QUIET_HOURS, preferences.language)

        allowed = tuple(
            channel
            for channel in channels
            if preferences.is_channel_enabled(notification_type, channel)
        )
        if not allowed:
            return self._skip(
                user_id, SkipReason.ALL_CHANNELS_DISABLED, preferences.language
            )

        return ResolutionResult(allowed_channels=allowed, language=preferences.language)

    def get_enabled_channels(
        self, user_id: str, notification_type: NotificationType
    ) -> List[NotificationChannel]:
        """All channels effectively enabled for the type, ignoring DND and quiet hours."""
        preferences = self.store.get(user_id)
        return [
            channel
            for channel in NotificationChannel
            if preferences.is_channel_enabled(notification_type, channel)
        ]

    def _skip(self, user_id: str, reason: SkipReason, language: str) -> ResolutionResult:
        logger.debug("preference_resolution_skipped", user_id=user_id, reason=reason.value)
        return ResolutionResult(skip_reason=reason, language=language)


def _normalize_channels(
    requested: Iterable[NotificationChannel],
) -> Tuple[NotificationChannel, ...]:
    return tuple(dict.fromkeys(parse_channel(channel) for channel in requested))
