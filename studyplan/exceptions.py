"""Errors raised by the study plan core."""


class StudyPlanError(Exception):
    """Base class for every error the core raises"""


class PlanNotFoundError(StudyPlanError):
    def __init__(self, plan_id):
        super().__init__(f"Plan {plan_id} not found")
        self.plan_id = plan_id


class PlanEndedError(StudyPlanError):
    def __init__(self, plan_id):
        super().__init__(f"Plan {plan_id} has ended")
        self.plan_id = plan_id


class StoreError(StudyPlanError):
    """Reading or writing the store failed; staged changes were rolled back"""


class InvalidScheduleError(StudyPlanError, ValueError):
    """Schedule is not 7 booleans with at least one scheduled day"""


class InvalidStatusError(StudyPlanError, ValueError):
    """Unknown session status, or a transition the recorder refuses"""
