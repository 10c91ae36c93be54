from datetime import date, datetime, timedelta

import pytest

from studyplan.exceptions import InvalidScheduleError
from studyplan.schedule import (
    count_scheduled_days,
    is_scheduled_day,
    most_recent_scheduled_day,
    normalize_day,
    previous_scheduled_day,
    previous_scheduled_offset,
    require_streak_schedule,
    schedule_to_sentence,
    validate_schedule,
    weekday_index,
)
from tests.conftest import EVERY_DAY, MON_WED_FRI, MONDAY, MONDAY_ONLY


def test_weekday_index_starts_on_monday():
    assert weekday_index(MONDAY) == 0
    assert weekday_index(date(2025, 8, 10)) == 6


def test_normalize_day_drops_time():
    assert normalize_day(datetime(2025, 8, 4, 23, 59)) == MONDAY
    assert normalize_day(MONDAY) == MONDAY


def test_empty_schedule_is_every_day():
    assert all(is_scheduled_day([], idx) for idx in range(7))


def test_is_scheduled_day():
    assert is_scheduled_day(MON_WED_FRI, 0)
    assert not is_scheduled_day(MON_WED_FRI, 1)


@pytest.mark.parametrize("schedule, weekday_idx, expected", [
    (MON_WED_FRI, 0, 3),  # Monday looks back to Friday
    (MON_WED_FRI, 2, 2),
    (MON_WED_FRI, 4, 2),
    (MON_WED_FRI, 5, 1),  # Saturday looks back to Friday
    (MONDAY_ONLY, 0, 7),
    (EVERY_DAY, 3, 1),
])
def test_previous_scheduled_offset(schedule, weekday_idx, expected):
    assert previous_scheduled_offset(schedule, weekday_idx) == expected


def test_previous_and_most_recent_scheduled_day():
    saturday = date(2025, 8, 9)
    assert previous_scheduled_day(MON_WED_FRI, MONDAY) == date(2025, 8, 1)
    assert most_recent_scheduled_day(MON_WED_FRI, saturday) == date(2025, 8, 8)
    assert most_recent_scheduled_day(MON_WED_FRI, MONDAY) == MONDAY


def test_count_scheduled_days():
    assert count_scheduled_days(MON_WED_FRI, MONDAY, date(2025, 8, 10)) == 3
    assert count_scheduled_days(MONDAY_ONLY, MONDAY, MONDAY) == 1
    assert count_scheduled_days([], MONDAY, date(2025, 8, 10)) == 7
    assert count_scheduled_days(MON_WED_FRI, date(2025, 8, 10), MONDAY) == 0


def test_count_scheduled_days_matches_day_by_day_walk():
    start, end = date(2025, 8, 6), date(2025, 10, 17)
    walked = 0
    day = start
    while day <= end:
        walked += MON_WED_FRI[day.weekday()]
        day += timedelta(days=1)
    assert count_scheduled_days(MON_WED_FRI, start, end) == walked


@pytest.mark.parametrize("schedule", [[], [True] * 6, [False] * 7, [1, 0, 0, 0, 0, 0, 0], None])
def test_validate_schedule_rejects(schedule):
    with pytest.raises(InvalidScheduleError):
        validate_schedule(schedule)


def test_validate_schedule_accepts():
    assert validate_schedule(tuple(MON_WED_FRI)) == MON_WED_FRI


def test_streaks_require_a_schedule():
    with pytest.raises(InvalidScheduleError):
        require_streak_schedule([])


@pytest.mark.parametrize("schedule, sentence", [
    (EVERY_DAY, "Every day"),
    ([True] * 5 + [False] * 2, "Every weekday"),
    ([False] * 5 + [True] * 2, "Every weekend"),
    (MONDAY_ONLY, "Every Monday"),
    ([True, False, False, False, True, False, False], "Every Monday and Friday"),
    (MON_WED_FRI, "Every Monday, Wednesday and Friday"),
    ([False] * 7, ""),
    ([], ""),
])
def test_schedule_to_sentence(schedule, sentence):
    assert schedule_to_sentence(schedule) == sentence
