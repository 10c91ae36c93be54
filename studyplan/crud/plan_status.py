import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from studyplan.crud.plan import require_plan
from studyplan.crud.streak import apply_completion_streak
from studyplan.database import commit_or_rollback, store_errors
from studyplan.exceptions import InvalidStatusError, PlanEndedError
from studyplan.models import PlanStatus
from studyplan.schedule import normalize_day, require_streak_schedule, weekday_index
from studyplan.schemas import SessionStatus

logger = logging.getLogger(__name__)

def get_status(db: Session, plan_id: int, day: date) -> Optional[PlanStatus]:
    """Get the status row for a plan on a given day"""
    return db.query(PlanStatus).filter(
        PlanStatus.plan_id == plan_id,
        PlanStatus.date == normalize_day(day)
    ).first()

def get_plan_statuses(
    db: Session,
    plan_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[PlanStatus]:
    """Status history of a plan, oldest first, optionally limited to [start, end]"""
    query = db.query(PlanStatus).filter(PlanStatus.plan_id == plan_id)
    if start is not None:
        query = query.filter(PlanStatus.date >= normalize_day(start))
    if end is not None:
        query = query.filter(PlanStatus.date <= normalize_day(end))
    return query.order_by(PlanStatus.date).all()

def update_session_status(
    db: Session,
    plan_id: int,
    day: date,
    status: Union[SessionStatus, str],
    now: Optional[datetime] = None
) -> PlanStatus:
    """
    Record that a session was started, paused or reset.

    A day that is already completed keeps its completed row. Completing a
    session goes through record_completion so the streak is updated.
    """
    try:
        status = SessionStatus(status)
    except ValueError:
        raise InvalidStatusError(f"Unknown session status {status!r}") from None
    if status == SessionStatus.COMPLETED:
        raise InvalidStatusError("Use record_completion to complete a session")

    day = normalize_day(day)
    now = now or datetime.utcnow()

    with store_errors(db):
        plan = require_plan(db, plan_id)
        if plan.is_ended:
            raise PlanEndedError(plan_id)

        row = get_status(db, plan_id, day)
        if row is not None and row.status == SessionStatus.COMPLETED.value:
            logger.debug("Plan %s already completed on %s, keeping status", plan_id, day)
            return row

        if row is None:
            row = PlanStatus(plan_id=plan_id, date=day, status=status.value, updated_at=now)
            db.add(row)
        else:
            row.status = status.value
            row.updated_at = now

        commit_or_rollback(db)
    return row

def record_completion(
    db: Session,
    plan_id: int,
    day: date,
    minutes_studied: int,
    now: Optional[datetime] = None
) -> PlanStatus:
    """
    Mark a plan's session on `day` as completed and update its streak.

    The status row and the streak change are committed together; if any
    read or the commit fails neither is stored and StoreError is raised.

    Args:
        plan_id: Plan that was studied
        day: Calendar day of the session (time of day is ignored)
        minutes_studied: Minutes actually studied
        now: Timestamp for updated_at, defaults to the current time
    """
    day = normalize_day(day)
    now = now or datetime.utcnow()

    with store_errors(db):
        plan = require_plan(db, plan_id)
        if plan.is_ended:
            raise PlanEndedError(plan_id)
        require_streak_schedule(plan.schedule)

        row = get_status(db, plan_id, day)
        already_completed = row is not None and row.status == SessionStatus.COMPLETED.value

        if row is None:
            row = PlanStatus(
                plan_id=plan_id,
                date=day,
                status=SessionStatus.COMPLETED.value,
                updated_at=now,
                passed_time=minutes_studied
            )
            db.add(row)
        else:
            row.status = SessionStatus.COMPLETED.value
            row.updated_at = now
            if row.passed_time is None:
                row.passed_time = minutes_studied

        # A second completion on the same day must not count twice
        if not already_completed:
            apply_completion_streak(db, plan, day)

        commit_or_rollback(db)
    logger.info("Plan %s completed on %s (%s min), streak %s", plan_id, day, row.passed_time, plan.streak)
    return row

def get_weekly_study_minutes(db: Session, week_of: date) -> List[int]:
    """Minutes studied on completed sessions for each day, Monday to Sunday, of the week containing week_of"""
    week_of = normalize_day(week_of)
    monday = week_of - timedelta(days=weekday_index(week_of))
    sunday = monday + timedelta(days=6)

    rows = db.query(PlanStatus).filter(
        PlanStatus.status == SessionStatus.COMPLETED.value,
        PlanStatus.date >= monday,
        PlanStatus.date <= sunday
    ).all()

    totals = [0] * 7
    for row in rows:
        totals[weekday_index(row.date)] += row.passed_time or 0
    return totals
