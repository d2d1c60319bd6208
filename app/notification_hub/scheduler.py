"""Deferred dispatch.

The dispatcher hands future-dated requests to a scheduler and never
dispatches them synchronously. TimerScheduler keeps pending work in
process memory only, so it is lost on restart.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List

from notification_hub.logging import get_module_logger

logger = get_module_logger()


class NotificationScheduler(ABC):
    """Abstract base for schedulers."""

    @abstractmethod
    def schedule(
        self, request_id: str, run_at: datetime, callback: Callable[[], None]
    ) -> None:
        """Run ``callback`` at ``run_at``, keyed by ``request_id``."""
        pass

    @abstractmethod
    def cancel(self, request_id: str) -> bool:
        """Cancel pending work. Returns False if nothing was pending."""
        pass

    @abstractmethod
    def pending(self) -> List[str]:
        """Request ids still waiting to run."""
        pass


class TimerScheduler(NotificationScheduler):
    """Scheduler backed by one daemon ``threading.Timer`` per request."""

    def __init__(self) -> None:
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def schedule(
        self, request_id: str, run_at: datetime, callback: Callable[[], None]
    ) -> None:
        delay = max((run_at - datetime.now(timezone.utc)).total_seconds(), 0.0)
        timer = threading.Timer(delay, self._run, args=(request_id, callback))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(request_id, None)
            if previous is not None:
                previous.cancel()
            self._timers[request_id] = timer
        timer.start()
        logger.info(
            "notification_scheduled",
            request_id=request_id,
            run_at=run_at.isoformat(),
            delay_seconds=delay,
        )

    def cancel(self, request_id: str) -> bool:
        with self._lock:
            timer = self._timers.pop(request_id, None)
        if timer is None:
            return False
        timer.cancel()
        logger.info("scheduled_notification_cancelled", request_id=request_id)
        return True

    def pending(self) -> List[str]:
        with self._lock:
            return list(self._timers)

    def shutdown(self) -> None:
        """Cancel every pending timer."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def _run(self, request_id: str, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._timers.pop(request_id, None) is None:
                return
        try:
            callback()
        except Exception as e:
            logger.error(
                "scheduled_notification_failed",
                request_id=request_id,
                error=str(e),
                exc_info=True,
            )
