"""User notification preferences.

Exports the preference models, the store contract with its in-memory
implementation, and the resolver used by the dispatcher.
"""

from notification_hub.preferences.models import (
    NotificationTypePreference,
    PreferenceStatistics,
    UserNotificationPreferences,
)
from notification_hub.preferences.store import (
    InMemoryPreferencesStore,
    PreferencesStore,
)
from notification_hub.preferences.resolver import PreferenceResolver, ResolutionResult

__all__ = [
    "NotificationTypePreference",
    "PreferenceStatistics",
    "UserNotificationPreferences",
    "PreferencesStore",
    "InMemoryPreferencesStore",
    "PreferenceResolver",
    "ResolutionResult",
]
