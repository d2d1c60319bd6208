"""Unit tests for delivery history and the timer scheduler."""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from notification_hub.history import InMemoryDeliveryHistoryStore
from notification_hub.models import (
    DeliveryOutcome,
    DeliveryStatus,
    NotificationChannel,
    NotificationType,
)
from notification_hub.scheduler import TimerScheduler

BASE = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _outcome(request_id, channel, status=DeliveryStatus.SENT, user_id="user-1", minute=0):
    return DeliveryOutcome(
        request_id=request_id,
        user_id=user_id,
        channel=channel,
        notification_type=NotificationType.GENERAL,
        status=status,
        updated_at=BASE + timedelta(minutes=minute),
    )


@pytest.mark.unit
class TestInMemoryDeliveryHistoryStore:
    """Tests for InMemoryDeliveryHistoryStore."""

    def test_outcomes_are_kept_per_channel(self, history):
        history.record(_outcome("r1", NotificationChannel.EMAIL))
        history.record(
            _outcome("r1", NotificationChannel.SMS, status=DeliveryStatus.FAILED)
        )

        outcomes = history.get_outcomes("r1")

        assert outcomes[NotificationChannel.EMAIL].status == DeliveryStatus.SENT
        assert outcomes[NotificationChannel.SMS].status == DeliveryStatus.FAILED

    def test_record_replaces_same_channel(self, history):
        history.record(
            _outcome("r1", NotificationChannel.SMS, status=DeliveryStatus.FAILED)
        )
        history.record(_outcome("r1", NotificationChannel.SMS))

        assert history.get_outcome("r1", NotificationChannel.SMS).status == (
            DeliveryStatus.SENT
        )

    def test_unknown_request(self, history):
        assert history.get_outcomes("nope") == {}
        assert history.get_outcome("nope", NotificationChannel.EMAIL) is None
        assert history.get_request("nope") is None

    def test_history_newest_first_with_limit(self, history):
        for minute in range(5):
            history.record(
                _outcome(f"r{minute}", NotificationChannel.EMAIL, minute=minute)
            )

        recent = history.get_history("user-1", limit=3)

        assert [o.request_id for o in recent] == ["r4", "r3", "r2"]

    def test_oldest_requests_evicted(self, request_factory):
        history = InMemoryDeliveryHistoryStore(max_requests_per_user=2)
        requests = [request_factory() for _ in range(3)]
        for request in requests:
            history.remember_request(request)
            history.record(_outcome(request.request_id, NotificationChannel.EMAIL))

        assert history.get_request(requests[0].request_id) is None
        assert history.get_outcomes(requests[0].request_id) == {}
        assert history.get_request(requests[2].request_id) is not None
        assert len(history.get_history("user-1")) == 2

    def test_returned_outcomes_are_copies(self, history):
        history.record(_outcome("r1", NotificationChannel.EMAIL))

        history.get_outcomes("r1")[NotificationChannel.EMAIL].status = (
            DeliveryStatus.FAILED
        )

        assert history.get_outcome("r1", NotificationChannel.EMAIL).status == (
            DeliveryStatus.SENT
        )


@pytest.mark.unit
class TestTimerScheduler:
    """Tests for TimerScheduler."""

    def test_callback_runs_and_entry_is_forgotten(self):
        scheduler = TimerScheduler()
        fired = threading.Event()

        scheduler.schedule("r1", datetime.now(timezone.utc), fired.set)

        assert fired.wait(timeout=5)
        assert scheduler.pending() == []

    def test_cancel_pending(self):
        scheduler = TimerScheduler()
        callback = MagicMock()
        scheduler.schedule(
            "r1", datetime.now(timezone.utc) + timedelta(hours=1), callback
        )

        assert scheduler.pending() == ["r1"]
        assert scheduler.cancel("r1") is True
        assert scheduler.cancel("r1") is False
        assert scheduler.pending() == []
        callback.assert_not_called()

    def test_reschedule_replaces_previous(self):
        scheduler = TimerScheduler()
        later = datetime.now(timezone.utc) + timedelta(hours=1)
        scheduler.schedule("r1", later, MagicMock())
        scheduler.schedule("r1", later, MagicMock())

        assert scheduler.pending() == ["r1"]
        scheduler.shutdown()
        assert scheduler.pending() == []

    def test_callback_failure_is_contained(self):
        scheduler = TimerScheduler()
        done = threading.Event()

        def failing():
            done.set()
            raise RuntimeError("boom")

        scheduler.schedule("r1", datetime.now(timezone.utc), failing)

        assert done.wait(timeout=5)
        assert scheduler.cancel("r1") is False
