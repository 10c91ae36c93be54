from datetime import date

from studyplan.schedule import is_scheduled_day, normalize_day, weekday_index


def is_due_today(plan, today: date) -> bool:
    """
    Check whether a plan should be studied on the given day.

    The plan must not be ended, today must fall within its start/end dates
    and today's weekday must be on its schedule. A plan without a start
    date is never due; an empty schedule counts as every day.
    """
    if plan.is_ended:
        return False

    today = normalize_day(today)
    if plan.start_date is None or normalize_day(plan.start_date) > today:
        return False
    if plan.end_date is not None and today > normalize_day(plan.end_date):
        return False

    return is_scheduled_day(plan.schedule or [], weekday_index(today))
