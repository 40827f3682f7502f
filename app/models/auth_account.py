import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base


class AuthAccount(Base):
    """Identity record. Credentials live here, display data on UserProfile."""

    __tablename__ = "auth_accounts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_sign_in_at = Column(DateTime, nullable=True)

    # Relationships
    profile = relationship("UserProfile", back_populates="account", uselist=False)

    def __repr__(self):
        return f"<AuthAccount {self.email}>"
