import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Text, Float, Integer, Boolean, Date, DateTime, CheckConstraint, Index,
)
from sqlalchemy.dialects.postgresql import UUID

from app.core.database import Base


TASK_PRIORITIES = ("high", "normal", "low")


class ProjectComponent(Base):
    """A project component grouping activities. Read-only from the dashboard."""

    __tablename__ = "project_components"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    order = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<ProjectComponent {self.name}>"


class ProjectActivity(Base):
    __tablename__ = "project_activities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Weak reference: removing a component leaves its activities untouched
    component_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    activity_name = Column(String(500), nullable=False)
    responsible = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False, default="Non démarré")
    priority = Column(String(20), nullable=False, default="normal")
    progress = Column(Integer, nullable=False, default=0)
    tdr_done = Column(Boolean, nullable=False, default=False)
    marche_done = Column(Boolean, nullable=False, default=False)
    contract_done = Column(Boolean, nullable=False, default=False)
    comment = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    budget_allocated = Column(Float, nullable=True)
    budget_spent = Column(Float, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_project_activities_progress"),
        CheckConstraint("priority IN ('high', 'normal', 'low')", name="ck_project_activities_priority"),
        Index("ix_project_activities_order", "order"),
    )

    def __repr__(self):
        return f"<ProjectActivity {self.activity_name}>"
