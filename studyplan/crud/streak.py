import logging
from datetime import date

from sqlalchemy.orm import Session

from studyplan.database import commit_or_rollback, store_errors
from studyplan.exceptions import InvalidScheduleError
from studyplan.models import Plan, PlanStatus
from studyplan.schedule import normalize_day
from studyplan.schemas import SessionStatus, SweepResult
from studyplan.streak import StreakEngine, recompute_streak_from_history

logger = logging.getLogger(__name__)

def is_completed_on(db: Session, plan_id: int, day: date) -> bool:
    """Check for a completed status row on the given day"""
    return db.query(PlanStatus.id).filter(
        PlanStatus.plan_id == plan_id,
        PlanStatus.date == normalize_day(day),
        PlanStatus.status == SessionStatus.COMPLETED.value
    ).first() is not None

def apply_completion_streak(db: Session, plan: Plan, day: date) -> int:
    """
    Update plan.streak for a session completed on `day`.

    Does not commit; the caller commits together with the status row.
    """
    day = normalize_day(day)
    earlier = db.query(PlanStatus.date).filter(
        PlanStatus.plan_id == plan.id,
        PlanStatus.status == SessionStatus.COMPLETED.value,
        PlanStatus.date < day
    ).order_by(PlanStatus.date.desc()).all()

    last_completed = StreakEngine.last_completed_scheduled_day(
        plan.schedule, [row.date for row in earlier], day
    )
    new_streak = StreakEngine.streak_after_completion(plan.schedule, plan.streak, day, last_completed)
    if new_streak == 0:
        logger.warning("Plan %s completed on unscheduled day %s, streak reset", plan.id, day)

    plan.streak = new_streak
    plan.last_streak_update = day
    return new_streak

def sweep_all_plans(db: Session, today: date) -> SweepResult:
    """
    Reset streaks of plans whose previous scheduled day was missed.

    Runs once per calendar day. Plans already evaluated today, plans not
    scheduled today and ended plans are left alone. Never increments.
    """
    today = normalize_day(today)
    result = SweepResult()

    with store_errors(db):
        plans = db.query(Plan).filter(Plan.is_ended == False).order_by(Plan.id).all()  # noqa: E712
        for plan in plans:
            result.examined += 1
            try:
                occurrence = StreakEngine.occurrence_to_check(
                    plan.schedule, plan.start_date, plan.last_streak_update, today
                )
            except InvalidScheduleError as e:
                logger.warning("Skipping plan %s in sweep: %s", plan.id, e)
                result.invalid += 1
                continue

            if occurrence is None:
                continue

            new_streak = StreakEngine.streak_after_sweep(plan.streak, is_completed_on(db, plan.id, occurrence))
            if new_streak is None:
                continue

            logger.info("Plan %s missed %s, streak %s -> %s", plan.id, occurrence, plan.streak, new_streak)
            plan.streak = new_streak
            plan.last_streak_update = today
            result.reset += 1

        commit_or_rollback(db)
    return result

def repair_streaks(db: Session, as_of: date) -> int:
    """Recompute every active plan's streak from its status history; returns how many changed"""
    as_of = normalize_day(as_of)
    changed = 0

    with store_errors(db):
        plans = db.query(Plan).filter(Plan.is_ended == False).order_by(Plan.id).all()  # noqa: E712
        for plan in plans:
            try:
                value = recompute_streak_from_history(plan, plan.statuses, as_of)
            except InvalidScheduleError as e:
                logger.warning("Skipping plan %s in repair: %s", plan.id, e)
                continue

            if value != plan.streak:
                logger.info("Plan %s streak repaired %s -> %s", plan.id, plan.streak, value)
                changed += 1
            plan.streak = value
            plan.last_streak_update = as_of

        commit_or_rollback(db)
    return changed
