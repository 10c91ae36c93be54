from datetime import date
from typing import Iterable, Optional, Sequence

from studyplan.schedule import (
    is_scheduled_day,
    most_recent_scheduled_day,
    normalize_day,
    previous_scheduled_day,
    previous_scheduled_offset,
    require_streak_schedule,
    weekday_index,
)

COMPLETED = "completed"


class StreakEngine:
    """
    Streak rules for recurring plans.

    A streak counts consecutive scheduled days that were completed, with no
    scheduled day skipped in between. Completions raise the streak as they
    happen; the daily sweep only ever lowers it.
    """

    @staticmethod
    def last_completed_scheduled_day(
        schedule: Sequence[bool],
        completed_dates: Iterable[date],
        before: date
    ) -> Optional[date]:
        """Most recent completed date strictly before `before` that falls on a scheduled weekday"""
        before = normalize_day(before)
        candidates = [
            normalize_day(d) for d in completed_dates
            if normalize_day(d) < before and is_scheduled_day(schedule, weekday_index(d))
        ]
        return max(candidates) if candidates else None

    @staticmethod
    def streak_after_completion(
        schedule: Sequence[bool],
        current_streak: int,
        day: date,
        last_completed: Optional[date]
    ) -> int:
        """
        New streak value after completing a session on `day`.

        Args:
            schedule: 7 weekday flags, Monday first
            current_streak: Streak stored on the plan
            day: Day the session was completed
            last_completed: Latest earlier completion on a scheduled day

        Returns:
            current_streak + 1 if the immediately preceding scheduled
            occurrence was completed, 1 if this starts a new run, and 0 when
            `day` is not a scheduled day.
        """
        schedule = require_streak_schedule(schedule)
        day = normalize_day(day)
        weekday_idx = weekday_index(day)

        if not is_scheduled_day(schedule, weekday_idx):
            return 0

        if last_completed is None:
            return 1

        expected_gap = previous_scheduled_offset(schedule, weekday_idx)
        if (day - normalize_day(last_completed)).days == expected_gap:
            return (current_streak or 0) + 1
        return 1

    @staticmethod
    def occurrence_to_check(
        schedule: Sequence[bool],
        start_date: Optional[date],
        last_streak_update: Optional[date],
        today: date
    ) -> Optional[date]:
        """
        Scheduled day the sweep has to verify, or None when there is nothing
        to evaluate today.
        """
        schedule = require_streak_schedule(schedule)
        today = normalize_day(today)

        if last_streak_update is not None and normalize_day(last_streak_update) == today:
            return None
        if not is_scheduled_day(schedule, weekday_index(today)):
            return None

        previous = previous_scheduled_day(schedule, today)
        if start_date is None or previous < normalize_day(start_date):
            return None
        return previous

    @staticmethod
    def streak_after_sweep(current_streak: int, previous_completed: bool) -> Optional[int]:
        """New streak value for the sweep to store, or None when nothing changes"""
        if previous_completed or not current_streak:
            return None
        return 0


def recompute_streak_from_history(plan, statuses, as_of: date) -> int:
    """
    Rebuild a plan's streak from its status rows alone.

    Gives the value the incremental rules would hold on `as_of` once that
    day's sweep has run. Completions on unscheduled days are ignored.
    """
    schedule = require_streak_schedule(plan.schedule)
    completed = {
        normalize_day(s.date) for s in statuses
        if s.status == COMPLETED and is_scheduled_day(schedule, weekday_index(s.date))
    }
    if not completed:
        return 0

    occurrence = most_recent_scheduled_day(schedule, as_of)
    if occurrence not in completed:
        occurrence = previous_scheduled_day(schedule, occurrence)

    earliest = min(completed)
    streak = 0
    while occurrence >= earliest and occurrence in completed:
        streak += 1
        occurrence = previous_scheduled_day(schedule, occurrence)
    return streak
