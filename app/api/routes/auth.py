import logging

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.deps import get_auth_context, get_client, get_current_auth
from app.core.access_policy import LOGIN_PATH, home_for
from app.core.config import settings
from app.core.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    RemoteOperationError,
    ValidationError,
)
from app.core.rate_limit import limiter
from app.panels.workspace import workspace_registry
from app.schemas.auth import AuthResponse, AuthStateResponse, LoginRequest, LogoutResponse, RegisterRequest
from app.services.auth_context import AuthContext
from app.services.client import ServiceClient
from app.services.identity_service import USER_ALREADY_REGISTERED, SessionInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

ALREADY_REGISTERED_MESSAGE = "Un utilisateur avec cet email existe déjà."


def _set_session_cookie(response: Response, session: SessionInfo) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def auth_state(auth: AuthContext) -> dict:
    state = auth.snapshot()
    state["redirect_to"] = home_for(auth.principal) if auth.user else LOGIN_PATH
    return state


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")  # Strict rate limit for login
def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    client: ServiceClient = Depends(get_client),
):
    """
    Sign in with email and password.
    Sets the session cookie and tells the browser where to land.
    """
    auth = AuthContext(client)
    result = auth.sign_in(data.email, data.password)
    if not result.ok:
        raise InvalidCredentialsError(result.error.message)

    _set_session_cookie(response, result.data)
    logger.info(f"User {result.data.user_id} signed in")
    return AuthResponse(access_token=result.data.access_token, **auth_state(auth))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")  # Strict rate limit for registration
def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    client: ServiceClient = Depends(get_client),
):
    """
    Create a reader account and sign it in.
    Self-registration never grants the admin role.
    """
    if data.confirm_password is not None and data.confirm_password != data.password:
        raise ValidationError("Passwords do not match")

    auth = AuthContext(client)
    result = auth.sign_up(data.email, data.password, data.full_name)
    if not result.ok:
        if result.error.message == USER_ALREADY_REGISTERED:
            raise AlreadyExistsError(detail=ALREADY_REGISTERED_MESSAGE)
        if result.error.status == 422:
            raise ValidationError(result.error.message)
        raise RemoteOperationError(result.error.message)

    _set_session_cookie(response, result.data)
    logger.info(f"New account registered: {result.data.user_id}")
    return AuthResponse(
        access_token=result.data.access_token,
        message="Compte créé !",
        **auth_state(auth),
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
):
    """
    Revoke the session and drop everything kept for it.
    Signing out without a session is not an error.
    """
    session = auth.user
    if session is not None:
        result = auth.sign_out()
        if not result.ok:
            raise RemoteOperationError(result.error.message)
        workspace_registry.discard(session.jti)
        logger.info(f"User {session.user_id} signed out")

    _clear_session_cookie(response)
    return LogoutResponse(message="Déconnexion réussie", redirect_to=LOGIN_PATH)


@router.get("/me", response_model=AuthStateResponse)
def get_me(auth: AuthContext = Depends(get_current_auth)):
    """Current user, profile and role."""
    return AuthStateResponse(**auth_state(auth))
