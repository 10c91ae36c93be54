import logging
import threading
from datetime import date
from typing import Callable, List, Optional

from studyplan.config import settings
from studyplan.crud import sweep_all_plans
from studyplan.database import SessionLocal

logger = logging.getLogger(__name__)

DayChangeCallback = Callable[[date], None]


class DayChangeWatcher:
    """
    Polls the calendar day and notifies subscribers when it changes.

    check() does one poll synchronously; start() repeats it on a background
    thread every interval_seconds until stop().
    """

    def __init__(self, interval_seconds: float = 60, clock: Callable[[], date] = date.today):
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.current_day = clock()
        self._subscribers: List[DayChangeCallback] = []
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def subscribe(self, callback: DayChangeCallback):
        self._subscribers.append(callback)

    def unsubscribe(self, callback: DayChangeCallback):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def check(self) -> bool:
        """Return True and notify subscribers if the day changed since the last check"""
        today = self.clock()
        if today == self.current_day:
            return False

        logger.info("Day changed: %s -> %s", self.current_day, today)
        self.current_day = today
        self.notify(today)
        return True

    def notify(self, today: date):
        """Run every subscriber for the given day"""
        for callback in list(self._subscribers):
            try:
                callback(today)
            except Exception:
                # One failing subscriber must not stop the others or the watcher
                logger.exception("Day change handler %r failed", callback)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="day-change-watcher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self):
        while not self._stop_event.wait(self.interval_seconds):
            self.check()


_watcher: Optional[DayChangeWatcher] = None


def get_day_watcher() -> DayChangeWatcher:
    """Process-wide watcher, created on first use"""
    global _watcher
    if _watcher is None:
        _watcher = DayChangeWatcher(interval_seconds=settings.sweep_interval_seconds)
    return _watcher


def run_daily_sweep(today: date):
    """Day change handler: sweep every plan in its own session"""
    db = SessionLocal()
    try:
        result = sweep_all_plans(db, today)
        logger.info(
            "Sweep for %s: %s plans examined, %s streaks reset",
            today, result.examined, result.reset
        )
    finally:
        db.close()
