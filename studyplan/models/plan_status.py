from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from studyplan.database import Base

class PlanStatus(Base):
    """Outcome of one plan's session on one calendar day"""
    __tablename__ = "plan_statuses"
    __table_args__ = (UniqueConstraint("plan_id", "date", name="uq_plan_status_day"),)

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False, default="idle")  # idle, running, paused, completed
    updated_at = Column(DateTime, default=datetime.utcnow)
    passed_time = Column(Integer)  # minutes studied

    plan = relationship("Plan", back_populates="statuses")

    def __repr__(self):
        return f"<PlanStatus plan={self.plan_id} {self.date} {self.status}>"
