"""Preference storage interface and in-memory implementation."""

import threading
from abc import ABC, abstractmethod
from collections import Counter
from datetime import time
from typing import Any, Callable, Dict, List, Optional

import structlog

from notification_hub.models import (
    NotificationChannel,
    NotificationType,
    parse_channel,
)
from notification_hub.preferences.models import (
    CHANNEL_FIELDS,
    NotificationTypePreference,
    PreferenceStatistics,
    UserNotificationPreferences,
)
from notification_hub.quiet_hours import as_wall_clock

logger = structlog.get_logger()

# Scalar fields accepted by import_preferences and the type each must have
_IMPORTABLE_FIELDS: Dict[str, type] = {
    "language": str,
    "timezone": str,
    "do_not_disturb": bool,
    "email_enabled": bool,
    "sms_enabled": bool,
    "push_enabled": bool,
    "in_app_enabled": bool,
    "webhook_enabled": bool,
}

_QUIET_HOURS_FIELDS = ("quiet_hours_start", "quiet_hours_end")


class PreferencesStore(ABC):
    """Abstract base for preference storage.

    Implementations provide the four primitives (get, update, reset,
    list_all). Opt-in/opt-out, import/export and statistics are built on
    top of them here, so a durable store only has to persist records.

    ``get`` must create and persist a default record for unknown users
    and must return a copy: callers write changes back through ``update``.
    """

    @abstractmethod
    def get(self, user_id: str) -> UserNotificationPreferences:
        """Return the user's preferences, creating defaults if absent."""
        pass

    @abstractmethod
    def update(self, preferences: UserNotificationPreferences) -> None:
        """Replace the stored record (last write wins)."""
        pass

    @abstractmethod
    def reset(self, user_id: str) -> UserNotificationPreferences:
        """Reset the user's record to defaults and return it."""
        pass

    @abstractmethod
    def list_all(self) -> List[UserNotificationPreferences]:
        """Return copies of every stored record."""
        pass

    def bulk_update(self, preferences: List[UserNotificationPreferences]) -> None:
        for record in preferences:
            self.update(record)

    def _mutate(
        self,
        user_id: str,
        change: Callable[[UserNotificationPreferences], None],
    ) -> UserNotificationPreferences:
        """Apply ``change`` to the user's record and store it."""
        preferences = self.get(user_id)
        change(preferences)
        self.update(preferences)
        return preferences

    # Opt-out management

    def opt_out(
        self,
        user_id: str,
        notification_type: NotificationType,
        channel: NotificationChannel,
    ) -> None:
        """Disable ``channel`` for ``notification_type`` regardless of the global toggle."""
        channel = parse_channel(channel)
        notification_type = NotificationType(notification_type)
        self._set_type_override(user_id, notification_type, channel, False)
        logger.info(
            "user_opted_out",
            user_id=user_id,
            notification_type=notification_type.value,
            channel=channel.value,
        )

    def opt_in(
        self,
        user_id: str,
        notification_type: NotificationType,
        channel: NotificationChannel,
    ) -> None:
        """Enable ``channel`` for ``notification_type`` regardless of the global toggle."""
        channel = parse_channel(channel)
        notification_type = NotificationType(notification_type)
        self._set_type_override(user_id, notification_type, channel, True)
        logger.info(
            "user_opted_in",
            user_id=user_id,
            notification_type=notification_type.value,
            channel=channel.value,
        )

    def is_opted_out(
        self,
        user_id: str,
        notification_type: NotificationType,
        channel: NotificationChannel,
    ) -> bool:
        channel = parse_channel(channel)
        notification_type = NotificationType(notification_type)
        return not self.get(user_id).is_channel_enabled(notification_type, channel)

    def _set_type_override(
        self,
        user_id: str,
        notification_type: NotificationType,
        channel: NotificationChannel,
        enabled: bool,
    ) -> None:
        def change(preferences: UserNotificationPreferences) -> None:
            type_preference = preferences.type_preferences.setdefault(
                notification_type, NotificationTypePreference()
            )
            type_preference.set(channel, enabled)

        self._mutate(user_id, change)

    def set_do_not_disturb(self, user_id: str, enabled: bool) -> None:
        def change(preferences: UserNotificationPreferences) -> None:
            preferences.do_not_disturb = enabled

        self._mutate(user_id, change)

    def set_quiet_hours(
        self, user_id: str, start: Optional[time], end: Optional[time]
    ) -> None:
        """Set the daily quiet window. Pass None for both to clear it."""

        def change(preferences: UserNotificationPreferences) -> None:
            preferences.quiet_hours_start = as_wall_clock(start) if start is not None else None
            preferences.quiet_hours_end = as_wall_clock(end) if end is not None else None

        self._mutate(user_id, change)

    # Import / export

    def export(self, user_id: str) -> Dict[str, Any]:
        """Export every field as plain values.

        Quiet hours are ``HH:MM:SS`` strings (None when unset) and type
        preferences are keyed by type value, then by channel field name.
        """
        preferences = self.get(user_id)
        exported: Dict[str, Any] = {
            "user_id": preferences.user_id,
            "language": preferences.language,
            "timezone": preferences.timezone,
            "do_not_disturb": preferences.do_not_disturb,
        }
        for field_name in CHANNEL_FIELDS.values():
            exported[field_name] = getattr(preferences, field_name)
        for field_name in _QUIET_HOURS_FIELDS:
            value = getattr(preferences, field_name)
            exported[field_name] = value.strftime("%H:%M:%S") if value is not None else None
        exported["type_preferences"] = {
            notification_type.value: type_preference.model_dump()
            for notification_type, type_preference in preferences.type_preferences.items()
        }
        return exported

    def import_preferences(self, user_id: str, data: Dict[str, Any]) -> None:
        """Import exported values into the user's record.

        Each field is type-checked on its own. A value of the wrong type
        is skipped and the existing value is kept; no error is raised.
        """

        def change(preferences: UserNotificationPreferences) -> None:
            skipped = []
            for field_name, expected_type in _IMPORTABLE_FIELDS.items():
                if field_name not in data:
                    continue
                value = data[field_name]
                # bool is a subclass of int, so compare exact types
                if type(value) is expected_type:
                    setattr(preferences, field_name, value)
                else:
                    skipped.append(field_name)

            for field_name in _QUIET_HOURS_FIELDS:
                if field_name not in data:
                    continue
                parsed = _parse_time(data[field_name])
                if parsed is _INVALID:
                    skipped.append(field_name)
                else:
                    setattr(preferences, field_name, parsed)

            type_preferences = data.get("type_preferences")
            if isinstance(type_preferences, dict):
                skipped.extend(
                    _import_type_preferences(preferences, type_preferences)
                )
            elif "type_preferences" in data:
                skipped.append("type_preferences")

            if skipped:
                logger.warning(
                    "preference_import_fields_skipped",
                    user_id=user_id,
                    fields=skipped,
                )

        self._mutate(user_id, change)

    def get_statistics(self) -> PreferenceStatistics:
        records = self.list_all()
        opt_outs: Counter = Counter()
        for record in records:
            for channel in NotificationChannel:
                if not record.global_enabled(channel):
                    opt_outs[channel] += 1

        return PreferenceStatistics(
            total_users=len(records),
            by_language=dict(Counter(r.language for r in records)),
            by_timezone=dict(Counter(r.timezone for r in records)),
            do_not_disturb_users=sum(1 for r in records if r.do_not_disturb),
            quiet_hours_users=sum(1 for r in records if r.has_quiet_hours),
            opt_out_counts={channel: opt_outs[channel] for channel in NotificationChannel},
        )


class InMemoryPreferencesStore(PreferencesStore):
    """Thread-safe, process-local preference store.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store. Not durable.
    """

    def __init__(self) -> None:
        self._records: Dict[str, UserNotificationPreferences] = {}
        self._lock = threading.RLock()

    def get(self, user_id: str) -> UserNotificationPreferences:
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                record = UserNotificationPreferences(user_id=user_id)
                self._records[user_id] = record
                logger.debug("created_default_preferences", user_id=user_id)
            return record.model_copy(deep=True)

    def update(self, preferences: UserNotificationPreferences) -> None:
        with self._lock:
            self._records[preferences.user_id] = preferences.model_copy(deep=True)

    def reset(self, user_id: str) -> UserNotificationPreferences:
        with self._lock:
            record = UserNotificationPreferences(user_id=user_id)
            self._records[user_id] = record
            logger.info("preferences_reset", user_id=user_id)
            return record.model_copy(deep=True)

    def list_all(self) -> List[UserNotificationPreferences]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records.values()]

    def _mutate(
        self,
        user_id: str,
        change: Callable[[UserNotificationPreferences], None],
    ) -> UserNotificationPreferences:
        with self._lock:
            return super()._mutate(user_id, change)


_INVALID = object()


def _parse_time(value: Any) -> Any:
    """Parse an imported quiet-hours value, returning _INVALID when unusable."""
    if value is None:
        return None
    if isinstance(value, time):
        return as_wall_clock(value)
    if not isinstance(value, str):
        return _INVALID
    try:
        return as_wall_clock(time.fromisoformat(value))
    except ValueError:
        return _INVALID


def _import_type_preferences(
    preferences: UserNotificationPreferences, data: Dict[Any, Any]
) -> List[str]:
    skipped = []
    for type_value, overrides in data.items():
        try:
            notification_type = NotificationType(type_value)
        except ValueError:
            skipped.append(f"type_preferences.{type_value}")
            continue
        if not isinstance(overrides, dict):
            skipped.append(f"type_preferences.{type_value}")
            continue

        type_preference = preferences.type_preferences.setdefault(
            notification_type, NotificationTypePreference()
        )
        for channel, field_name in CHANNEL_FIELDS.items():
            if field_name not in overrides:
                continue
            value = overrides[field_name]
            if value is None or type(value) is bool:
                type_preference.set(channel, value)
            else:
                skipped.append(f"type_preferences.{type_value}.{field_name}")
    return skipped
