import threading
from datetime import date

from studyplan import day_watcher
from studyplan.crud import get_plan, record_completion
from studyplan.day_watcher import DayChangeWatcher, get_day_watcher
from tests.conftest import MONDAY

TUESDAY = date(2025, 8, 5)


class FakeClock:
    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


def test_check_without_day_change():
    calls = []
    watcher = DayChangeWatcher(clock=FakeClock(MONDAY))
    watcher.subscribe(calls.append)

    assert watcher.check() is False
    assert calls == []


def test_check_notifies_once_per_day_change():
    clock = FakeClock(MONDAY)
    calls = []
    watcher = DayChangeWatcher(clock=clock)
    watcher.subscribe(calls.append)

    clock.today = TUESDAY
    assert watcher.check() is True
    assert watcher.check() is False

    assert calls == [TUESDAY]
    assert watcher.current_day == TUESDAY


def test_failing_subscriber_does_not_block_others():
    clock = FakeClock(MONDAY)
    calls = []

    def broken(day):
        raise RuntimeError("boom")

    watcher = DayChangeWatcher(clock=clock)
    watcher.subscribe(broken)
    watcher.subscribe(calls.append)

    clock.today = TUESDAY
    assert watcher.check() is True
    assert calls == [TUESDAY]


def test_unsubscribe():
    clock = FakeClock(MONDAY)
    calls = []
    watcher = DayChangeWatcher(clock=clock)
    watcher.subscribe(calls.append)
    watcher.unsubscribe(calls.append)

    clock.today = TUESDAY
    watcher.check()

    assert calls == []


def test_background_thread_fires_on_day_change():
    clock = FakeClock(MONDAY)
    fired = threading.Event()
    seen = []

    def on_change(day):
        seen.append(day)
        fired.set()

    watcher = DayChangeWatcher(interval_seconds=0.01, clock=clock)
    watcher.subscribe(on_change)
    watcher.start()
    try:
        assert watcher.running
        clock.today = TUESDAY
        assert fired.wait(timeout=5)
    finally:
        watcher.stop(timeout=5)

    assert seen == [TUESDAY]
    assert not watcher.running


def test_run_daily_sweep_uses_its_own_session(session_factory, make_plan, db, monkeypatch):
    plan = make_plan()
    record_completion(db, plan.id, MONDAY, 60)
    monkeypatch.setattr(day_watcher, "SessionLocal", session_factory)

    day_watcher.run_daily_sweep(date(2025, 8, 8))

    db.expire_all()
    assert get_plan(db, plan.id).streak == 0


def test_get_day_watcher_is_shared():
    assert get_day_watcher() is get_day_watcher()
