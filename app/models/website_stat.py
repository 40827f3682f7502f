import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, Float, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID

from app.core.database import Base


METRIC_TYPES = ("user", "project", "financial", "activity", "performance", "engagement")


class WebsiteStat(Base):
    __tablename__ = "website_stats"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    metric_name = Column(String(255), nullable=False)
    metric_value = Column(Float, nullable=False, default=0)
    metric_type = Column(String(30), nullable=False, default="user")
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "metric_type IN ('user', 'project', 'financial', 'activity', 'performance', 'engagement')",
            name="ck_website_stats_metric_type",
        ),
        Index("ix_website_stats_metric_name", "metric_name"),
    )

    def __repr__(self):
        return f"<WebsiteStat {self.metric_name}>"
