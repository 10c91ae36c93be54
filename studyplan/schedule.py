"""
Weekly recurrence helpers.

A schedule is a list of 7 booleans indexed Monday=0 ... Sunday=6. An empty
schedule means "every day" wherever a plan's due days are evaluated; the
streak rules refuse it (see require_streak_schedule).
"""

from datetime import date, datetime, timedelta
from typing import List, Sequence

from studyplan.exceptions import InvalidScheduleError

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def normalize_day(value) -> date:
    """Drop the time of day from a datetime; dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(day: date) -> int:
    """Monday=0 ... Sunday=6"""
    return normalize_day(day).weekday()


def is_scheduled_day(schedule: Sequence[bool], weekday_idx: int) -> bool:
    if not schedule:
        return True
    return bool(schedule[weekday_idx])


def validate_schedule(schedule) -> List[bool]:
    """Require exactly 7 booleans with at least one scheduled day"""
    if schedule is None or len(schedule) != 7:
        raise InvalidScheduleError("Schedule must have exactly 7 days (Monday to Sunday)")
    if not all(isinstance(flag, bool) for flag in schedule):
        raise InvalidScheduleError("Schedule entries must be true/false")
    if not any(schedule):
        raise InvalidScheduleError("Schedule needs at least one study day")
    return list(schedule)


def require_streak_schedule(schedule) -> List[bool]:
    """Streaks have no meaning without explicit study days"""
    if not schedule:
        raise InvalidScheduleError("Cannot compute a streak for a plan without scheduled days")
    return validate_schedule(schedule)


def previous_scheduled_offset(schedule: Sequence[bool], weekday_idx: int) -> int:
    """
    Days back from weekday_idx to the nearest earlier scheduled weekday.

    Always between 1 and 7; a schedule with a single study day gives 7.
    """
    for offset in range(1, 8):
        if is_scheduled_day(schedule, (weekday_idx - offset) % 7):
            return offset
    return 7


def previous_scheduled_day(schedule: Sequence[bool], day: date) -> date:
    day = normalize_day(day)
    return day - timedelta(days=previous_scheduled_offset(schedule, weekday_index(day)))


def most_recent_scheduled_day(schedule: Sequence[bool], day: date) -> date:
    """The given day if scheduled, otherwise the nearest scheduled day before it"""
    day = normalize_day(day)
    if is_scheduled_day(schedule, weekday_index(day)):
        return day
    return previous_scheduled_day(schedule, day)


def count_scheduled_days(schedule: Sequence[bool], start: date, end: date) -> int:
    """Number of scheduled calendar days in [start, end], inclusive"""
    start, end = normalize_day(start), normalize_day(end)
    if end < start:
        return 0

    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    per_week = sum(1 for idx in range(7) if is_scheduled_day(schedule, idx))

    count = full_weeks * per_week
    first_idx = weekday_index(start)
    for i in range(remainder):
        if is_scheduled_day(schedule, (first_idx + i) % 7):
            count += 1
    return count


def schedule_to_sentence(schedule: Sequence[bool]) -> str:
    """Describe a schedule in plain words, e.g. "Every Monday and Friday" """
    if not schedule:
        return ""
    active = [name for idx, name in enumerate(DAY_NAMES) if schedule[idx]]
    if not active:
        return ""
    if len(active) == 7:
        return "Every day"
    if all(schedule[:5]) and not schedule[5] and not schedule[6]:
        return "Every weekday"
    if not any(schedule[:5]) and schedule[5] and schedule[6]:
        return "Every weekend"
    if len(active) == 1:
        return f"Every {active[0]}"
    return f"Every {', '.join(active[:-1])} and {active[-1]}"
