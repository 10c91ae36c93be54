import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from studyplan.config import settings
from studyplan.database import commit_or_rollback
from studyplan.due import is_due_today
from studyplan.duration import auto_duration, format_duration_string
from studyplan.exceptions import PlanNotFoundError
from studyplan.models import Plan, PlanStatus
from studyplan.schedule import normalize_day
from studyplan.schemas import PlanCreate, PlanResponse, PlanUpdate, SessionStatus, TodaysPlan

logger = logging.getLogger(__name__)

def _apply_auto_duration(plan: Plan):
    """Derive the session length from the total hour target when possible"""
    if plan.total_hours_target is None or plan.end_date is None or plan.start_date is None:
        return
    derived = auto_duration(plan.total_hours_target, plan.schedule, plan.start_date, plan.end_date)
    if derived is None:
        logger.warning(
            "Cannot spread %s hours over plan %r between %s and %s; keeping %s",
            plan.total_hours_target, plan.title, plan.start_date, plan.end_date, plan.duration
        )
        return
    plan.duration = format_duration_string(derived)

def create_plan(db: Session, plan: PlanCreate) -> Plan:
    """Create a new study plan"""
    data = plan.model_dump(exclude={"duration"})
    db_plan = Plan(**data, duration=format_duration_string(plan.duration), streak=0, is_ended=False)
    _apply_auto_duration(db_plan)
    db.add(db_plan)
    commit_or_rollback(db)
    db.refresh(db_plan)
    logger.info("Created plan %s (%s)", db_plan.id, db_plan.title)
    return db_plan

def get_plan(db: Session, plan_id: int) -> Optional[Plan]:
    """Get plan by ID"""
    return db.query(Plan).filter(Plan.id == plan_id).first()

def require_plan(db: Session, plan_id: int) -> Plan:
    """Get plan by ID or raise PlanNotFoundError"""
    plan = get_plan(db, plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)
    return plan

def list_plans(db: Session, include_ended: bool = True) -> List[Plan]:
    """Get all plans, oldest first"""
    query = db.query(Plan)
    if not include_ended:
        query = query.filter(Plan.is_ended == False)  # noqa: E712
    return query.order_by(Plan.id).all()

def update_plan(db: Session, plan_id: int, plan_data: PlanUpdate) -> Plan:
    """Apply the fields set on plan_data to an existing plan"""
    db_plan = require_plan(db, plan_id)
    updates = plan_data.model_dump(exclude_unset=True)

    start = updates.get("start_date", db_plan.start_date)
    end = updates.get("end_date", db_plan.end_date)
    if start is not None and end is not None and end < start:
        raise ValueError("end_date must not be before start_date")

    duration = updates.pop("duration", None)
    if duration is not None:
        db_plan.duration = format_duration_string(plan_data.duration)
    for key, value in updates.items():
        setattr(db_plan, key, value)

    _apply_auto_duration(db_plan)
    commit_or_rollback(db)
    db.refresh(db_plan)
    return db_plan

def end_plan(db: Session, plan_id: int) -> Plan:
    """Mark a plan as ended; its streak is frozen from here on"""
    db_plan = require_plan(db, plan_id)
    if db_plan.is_ended:
        logger.warning("Plan %s is already ended", plan_id)
        return db_plan
    db_plan.is_ended = True
    commit_or_rollback(db)
    logger.info("Ended plan %s", plan_id)
    return db_plan

def delete_plan(db: Session, plan_id: int):
    """Delete a plan together with its status history"""
    db_plan = require_plan(db, plan_id)
    db.delete(db_plan)
    commit_or_rollback(db)
    logger.info("Deleted plan %s", plan_id)

def list_categories(db: Session) -> List[str]:
    """Default categories followed by any other category already in use"""
    used = [row[0] for row in db.query(Plan.category).distinct().order_by(Plan.category).all()]
    categories = list(settings.default_categories)
    for category in used:
        if category and category not in categories:
            categories.append(category)
    return categories

def get_todays_plans(db: Session, today: date) -> List[TodaysPlan]:
    """Plans due on the given day with that day's session status"""
    today = normalize_day(today)
    due = [plan for plan in list_plans(db, include_ended=False) if is_due_today(plan, today)]
    if not due:
        return []

    rows = db.query(PlanStatus).filter(
        PlanStatus.plan_id.in_([plan.id for plan in due]),
        PlanStatus.date == today
    ).all()
    status_by_plan = {row.plan_id: row.status for row in rows}

    return [
        TodaysPlan(
            **PlanResponse.model_validate(plan).model_dump(),
            status=status_by_plan.get(plan.id, SessionStatus.IDLE)
        )
        for plan in due
    ]
