from datetime import date, datetime, timedelta
from types import SimpleNamespace

from studyplan.due import is_due_today
from tests.conftest import MON_WED_FRI, MONDAY, MONDAY_ONLY


def make(**overrides):
    fields = {
        "is_ended": False,
        "start_date": MONDAY,
        "end_date": None,
        "schedule": MON_WED_FRI,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_due_on_scheduled_day_in_range():
    assert is_due_today(make(), MONDAY)
    assert is_due_today(make(), date(2025, 8, 6))


def test_not_due_on_unscheduled_day():
    assert not is_due_today(make(), date(2025, 8, 5))


def test_ended_plan_is_never_due():
    plan = make(is_ended=True, end_date=date(2025, 12, 31))
    assert not is_due_today(plan, MONDAY)


def test_plan_without_start_date_is_never_due():
    assert not is_due_today(make(start_date=None), MONDAY)


def test_not_due_before_start():
    assert not is_due_today(make(start_date=date(2025, 8, 6)), MONDAY)


def test_end_date_is_inclusive():
    plan = make(schedule=MONDAY_ONLY, end_date=date(2025, 8, 11))
    assert is_due_today(plan, date(2025, 8, 11))
    assert not is_due_today(plan, date(2025, 8, 18))


def test_open_ended_plan_stays_due():
    assert is_due_today(make(schedule=MONDAY_ONLY), date(2030, 1, 7))


def test_time_of_day_is_ignored():
    plan = make(start_date=datetime(2025, 8, 4, 18, 0))
    assert is_due_today(plan, datetime(2025, 8, 4, 7, 30))


def test_empty_schedule_is_due_every_day_in_range():
    plan = make(schedule=[], end_date=date(2025, 8, 10))
    for offset in range(7):
        assert is_due_today(plan, MONDAY + timedelta(days=offset))
    assert not is_due_today(plan, date(2025, 8, 11))
