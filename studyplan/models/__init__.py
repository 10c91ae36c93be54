from studyplan.models.plan import Plan
from studyplan.models.plan_status import PlanStatus

__all__ = [
    "Plan",
    "PlanStatus"
]
