from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, Float, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from studyplan.database import Base
from studyplan.duration import Duration, parse_duration_string, format_duration_string

class Plan(Base):
    """Recurring study goal with a weekly schedule"""
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String, nullable=False, index=True)

    schedule = Column(JSON, nullable=False, default=list)  # [Mon, Tue, ..., Sun] flags
    start_date = Column(Date)
    end_date = Column(Date)
    is_ended = Column(Boolean, nullable=False, default=False)  # set by "End Plan"

    duration = Column(String, nullable=False, default="0m")  # e.g. "1h 30m"
    total_hours_target = Column(Float)

    streak = Column(Integer, nullable=False, default=0)
    last_streak_update = Column(Date)

    created_at = Column(DateTime, default=datetime.utcnow)

    statuses = relationship(
        "PlanStatus",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanStatus.date"
    )

    @property
    def duration_target(self) -> Duration:
        return parse_duration_string(self.duration)

    @duration_target.setter
    def duration_target(self, value: Duration):
        self.duration = format_duration_string(value)

    def __repr__(self):
        return f"<Plan {self.id} {self.title!r} streak={self.streak}>"
