import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID

from app.core.database import Base


KPI_TRENDS = ("up", "down", "neutral")


class DashboardKPI(Base):
    __tablename__ = "dashboard_kpis"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key = Column(String(100), nullable=False, unique=True)  # immutable once created
    label = Column(String(255), nullable=False)
    value = Column(Float, nullable=False, default=0)
    unit = Column(String(50), nullable=True)  # e.g. "%", "FCFA"
    change = Column(String(50), nullable=True)  # e.g. "+12%"
    trend = Column(String(20), nullable=True, default="neutral")
    icon = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("trend IS NULL OR trend IN ('up', 'down', 'neutral')", name="ck_dashboard_kpis_trend"),
        Index("ix_dashboard_kpis_order", "order"),
    )

    def __repr__(self):
        return f"<DashboardKPI {self.key}>"
