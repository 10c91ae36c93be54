from studyplan.crud.plan import (
    create_plan,
    get_plan,
    require_plan,
    list_plans,
    update_plan,
    end_plan,
    delete_plan,
    list_categories,
    get_todays_plans
)
from studyplan.crud.plan_status import (
    get_status,
    get_plan_statuses,
    update_session_status,
    record_completion,
    get_weekly_study_minutes
)
from studyplan.crud.streak import sweep_all_plans, repair_streaks

__all__ = [
    "create_plan",
    "get_plan",
    "require_plan",
    "list_plans",
    "update_plan",
    "end_plan",
    "delete_plan",
    "list_categories",
    "get_todays_plans",
    "get_status",
    "get_plan_statuses",
    "update_session_status",
    "record_completion",
    "get_weekly_study_minutes",
    "sweep_all_plans",
    "repair_streaks",
]
