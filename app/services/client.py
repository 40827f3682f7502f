from sqlalchemy.orm import Session

from app.services.data_service import DataService
from app.services.identity_service import IdentityService


class ServiceClient:
    """Per-request handle on both boundaries: `.data` for rows, `.auth` for identity."""

    def __init__(self, db: Session):
        self.db = db
        self.data = DataService(db)
        self.auth = IdentityService(db)
