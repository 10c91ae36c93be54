from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from enum import Enum

from studyplan.duration import Duration, parse_duration_string
from studyplan.schedule import validate_schedule

def _strip_not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value

class SessionStatus(str, Enum):
    """State of a plan's session on a given day"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"

class PlanCreate(BaseModel):
    """Schema for creating a study plan"""
    title: str
    description: Optional[str] = None
    category: str
    schedule: List[bool]
    start_date: date
    end_date: Optional[date] = None
    duration: Duration = Field(default_factory=Duration)
    total_hours_target: Optional[float] = Field(default=None, gt=0)

    @field_validator("title", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_not_blank(value)

    @field_validator("schedule")
    @classmethod
    def check_schedule(cls, value: List[bool]) -> List[bool]:
        return validate_schedule(value)

    @model_validator(mode="after")
    def check_dates_and_duration(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        # Duration may be left empty only when it can be derived from total hours
        auto = self.total_hours_target is not None and self.end_date is not None
        if not auto and self.duration == Duration():
            raise ValueError("duration is required")
        return self

class PlanUpdate(BaseModel):
    """Schema for editing a plan; unset fields are left as they are"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    schedule: Optional[List[bool]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[Duration] = None
    total_hours_target: Optional[float] = Field(default=None, gt=0)

    @field_validator("title", "category")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _strip_not_blank(value)

    @field_validator("schedule")
    @classmethod
    def check_schedule(cls, value: Optional[List[bool]]) -> Optional[List[bool]]:
        if value is None:
            return value
        return validate_schedule(value)

    @model_validator(mode="after")
    def check_required_fields(self):
        # These may be left out, but never cleared
        for name in ("title", "category", "schedule", "start_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

class PlanResponse(BaseModel):
    """Schema for plan response"""
    id: int
    title: str
    description: Optional[str] = None
    category: str
    schedule: List[bool]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_ended: bool = False
    duration: Duration
    total_hours_target: Optional[float] = None
    streak: int = 0
    last_streak_update: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, value):
        if isinstance(value, str):
            return parse_duration_string(value)
        return value

class TodaysPlan(PlanResponse):
    """Plan due today together with today's session status"""
    status: SessionStatus = SessionStatus.IDLE

class PlanStatusResponse(BaseModel):
    """Schema for a daily status record"""
    id: int
    plan_id: int
    date: date
    status: SessionStatus
    updated_at: Optional[datetime] = None
    passed_time: Optional[int] = None

    class Config:
        from_attributes = True

class SweepResult(BaseModel):
    """Counts from one pass of the daily streak sweep"""
    examined: int = 0
    reset: int = 0
    invalid: int = 0
