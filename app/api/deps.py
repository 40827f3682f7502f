from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.access_policy import ADMIN_HOME, evaluate_access
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.exceptions import ForbiddenError, NotAuthenticatedError, PageRedirect
from app.panels.workspace import AdminWorkspace, workspace_registry
from app.services.auth_context import AuthContext
from app.services.client import ServiceClient


# Browsers send the session cookie; API clients may use a bearer token instead
security = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_client(db: Session = Depends(get_db)) -> ServiceClient:
    return ServiceClient(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Session token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    return credentials.credentials if credentials else None


def get_auth_context(
    token: Optional[str] = Depends(get_session_token),
    client: ServiceClient = Depends(get_client),
) -> AuthContext:
    """Auth context resolved for this request (never left in the loading state)."""
    return AuthContext(client).resolve(token)


def get_current_auth(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """
    Dependency requiring a valid session.
    Raises NotAuthenticatedError if the token is missing, expired or revoked.
    """
    if auth.user is None:
        raise NotAuthenticatedError("Could not validate credentials")
    return auth


def require_admin(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
    """
    Dependency to require the admin role.
    Uses the same policy as the session gate, applied to the admin area.
    """
    if not evaluate_access(ADMIN_HOME, auth.principal).allowed:
        raise ForbiddenError("Admin access required")
    return auth


def require_page_access(request: Request, auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Page guard: redirect wherever the access policy says this principal belongs."""
    decision = evaluate_access(request.url.path, auth.principal)
    if not decision.allowed:
        raise PageRedirect(decision.location)
    return auth


def get_workspace(auth: AuthContext = Depends(require_admin)) -> AdminWorkspace:
    """The admin panels kept for this session."""
    return workspace_registry.get(
        auth.user.jti, user_id=auth.user.user_id, expires_at=auth.user.expires_at
    )
