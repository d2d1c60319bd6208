"""Delivery outcome history.

Outcomes are stored per (request id, channel). Recording an outcome for
one channel never touches another channel's record, so a late failure on
SMS cannot erase an email success for the same request.
"""

import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, List, Optional

from notification_hub.models import (
    DeliveryOutcome,
    NotificationChannel,
    NotificationRequest,
)


class DeliveryHistoryStore(ABC):
    """Abstract base for outcome history storage."""

    @abstractmethod
    def record(self, outcome: DeliveryOutcome) -> None:
        """Insert or replace the outcome for (request_id, channel)."""
        pass

    @abstractmethod
    def get_outcomes(self, request_id: str) -> Dict[NotificationChannel, DeliveryOutcome]:
        """All channel outcomes of a request, empty if unknown."""
        pass

    @abstractmethod
    def remember_request(self, request: NotificationRequest) -> None:
        """Keep the submitted request so it can be retried later."""
        pass

    @abstractmethod
    def get_request(self, request_id: str) -> Optional[NotificationRequest]:
        pass

    @abstractmethod
    def get_history(self, user_id: str, limit: int = 50) -> List[DeliveryOutcome]:
        """The user's outcomes, most recently updated first."""
        pass

    def get_outcome(
        self, request_id: str, channel: NotificationChannel
    ) -> Optional[DeliveryOutcome]:
        return self.get_outcomes(request_id).get(channel)


class InMemoryDeliveryHistoryStore(DeliveryHistoryStore):
    """Thread-safe, process-local history.

    Keeps the most recent ``max_requests_per_user`` requests per user;
    older requests and their outcomes are dropped.
    """

    def __init__(self, max_requests_per_user: int = 1000):
        self.max_requests_per_user = max_requests_per_user
        self._outcomes: Dict[str, Dict[NotificationChannel, DeliveryOutcome]] = {}
        self._requests: Dict[str, NotificationRequest] = {}
        self._user_requests: Dict[str, "OrderedDict[str, None]"] = {}
        self._lock = threading.Lock()

    def record(self, outcome: DeliveryOutcome) -> None:
        with self._lock:
            self._track(outcome.user_id, outcome.request_id)
            self._outcomes.setdefault(outcome.request_id, {})[outcome.channel] = (
                outcome.model_copy(deep=True)
            )

    def get_outcomes(self, request_id: str) -> Dict[NotificationChannel, DeliveryOutcome]:
        with self._lock:
            return {
                channel: outcome.model_copy(deep=True)
                for channel, outcome in self._outcomes.get(request_id, {}).items()
            }

    def remember_request(self, request: NotificationRequest) -> None:
        with self._lock:
            self._track(request.user_id, request.request_id)
            self._requests[request.request_id] = request

    def get_request(self, request_id: str) -> Optional[NotificationRequest]:
        with self._lock:
            return self._requests.get(request_id)

    def get_history(self, user_id: str, limit: int = 50) -> List[DeliveryOutcome]:
        with self._lock:
            outcomes = [
                outcome.model_copy(deep=True)
                for request_id in self._user_requests.get(user_id, ())
                for outcome in self._outcomes.get(request_id, {}).values()
            ]
        outcomes.sort(key=lambda o: o.updated_at, reverse=True)
        return outcomes[:limit]

    def _track(self, user_id: str, request_id: str) -> None:
        """Register a request under its user and evict the oldest beyond the cap."""
        requests = self._user_requests.setdefault(user_id, OrderedDict())
        requests[request_id] = None
        while len(requests) > self.max_requests_per_user:
            evicted, _ = requests.popitem(last=False)
            self._outcomes.pop(evicted, None)
            self._requests.pop(evicted, None)
