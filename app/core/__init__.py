from app.core.config import settings
from app.core.database import Base, engine, SessionLocal
from app.core.access_policy import Principal, evaluate_access

__all__ = ["settings", "Base", "engine", "SessionLocal", "Principal", "evaluate_access"]
