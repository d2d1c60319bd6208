"""Quiet-hours window evaluation.

A quiet window is a recurring daily interval ``[start, end)``. When
``start >= end`` the window spans midnight, so 23:00 to 06:00 covers
late evening and early morning.
"""

from datetime import datetime, time, timezone
from typing import Optional, Union

import pytz

from notification_hub.logging import get_module_logger

logger = get_module_logger()


def as_wall_clock(value: time) -> time:
    """Drop any UTC offset from a time of day.

    Quiet-hours bounds are wall-clock times in the user's own timezone,
    so an offset carried by an imported or hand-built value is ignored.
    """
    return value.replace(tzinfo=None)


def is_quiet_now(
    start: Optional[time],
    end: Optional[time],
    now: Union[datetime, time],
) -> bool:
    """Return True when ``now`` falls inside the quiet window.

    Only the time-of-day of ``now`` is compared. If either bound is unset
    the window is disabled.

    Args:
        start: Window start (inclusive)
        end: Window end (exclusive)
        now: Current instant, already expressed in the user's timezone

    Returns:
        Whether notifications should be held back.

    Example:
        >>> is_quiet_now(time(23, 0), time(6, 0), time(5, 59))
        True
        >>> is_quiet_now(time(23, 0), time(6, 0), time(6, 0))
        False
    """
    if start is None or end is None:
        return False

    start = as_wall_clock(start)
    end = as_wall_clock(end)
    current = as_wall_clock(now.time() if isinstance(now, datetime) else now)

    if start < end:
        return start <= current < end
    return current >= start or current < end


def to_user_time(now: datetime, tz_name: str) -> datetime:
    """Convert ``now`` into the user's timezone.

    Naive datetimes are taken as UTC. An unknown timezone name falls back
    to UTC with a warning rather than failing the dispatch.

    Args:
        now: Instant to convert
        tz_name: IANA timezone name, e.g. "America/Toronto"

    Returns:
        Timezone-aware datetime in the user's local time.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        user_tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("unknown_user_timezone", timezone=tz_name, fallback="UTC")
        user_tz = pytz.utc

    return now.astimezone(user_tz)
