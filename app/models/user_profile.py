from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base


USER_ROLES = ("user", "admin")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Shares its primary key with the owning auth account
    id = Column(UUID(as_uuid=True), ForeignKey("auth_accounts.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="user")  # "user" or "admin"
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    account = relationship("AuthAccount", back_populates="profile")

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_user_profiles_role"),
        Index("ix_user_profiles_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<UserProfile {self.email}>"
