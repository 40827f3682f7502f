"""
Identity boundary: accounts, credentials and session tokens.

Every operation answers with an AuthResult instead of raising, so callers
can show the message to the user and stay interactive.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.sanitization import sanitize_email, sanitize_name, validate_email
from app.core.security import (
    blacklist_token,
    create_access_token,
    get_password_hash,
    is_token_blacklisted,
    password_strength_error,
    verify_password,
    verify_token,
)
from app.models import AuthAccount, UserProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_CREDENTIALS = "Invalid login credentials"
USER_ALREADY_REGISTERED = "User already registered"


@dataclass
class AuthError:
    message: str
    status: int = 400


@dataclass
class AuthResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SessionInfo:
    """An authenticated browser session."""
    user_id: UUID
    email: str
    access_token: str
    jti: str
    expires_at: datetime


@dataclass
class AccountInfo:
    id: UUID
    email: str
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)


class IdentityService:
    """Sign-in/up/out, session lookup, and privileged account management."""

    def __init__(self, db: Session):
        self.db = db

    def _issue_session(self, account: AuthAccount) -> SessionInfo:
        token, jti, expires_at = create_access_token(
            data={"sub": str(account.id), "email": account.email}
        )
        return SessionInfo(
            user_id=account.id,
            email=account.email,
            access_token=token,
            jti=jti,
            expires_at=expires_at,
        )

    def _validate_new_account(self, email: str, password: str) -> Optional[AuthError]:
        if not validate_email(email):
            return AuthError("Invalid email format")
        weakness = password_strength_error(password or "")
        if weakness:
            return AuthError(weakness, status=422)
        if self.db.query(AuthAccount).filter(AuthAccount.email == email).first():
            return AuthError(USER_ALREADY_REGISTERED, status=409)
        return None

    def _create(self, email: str, password: str, metadata: Optional[dict]) -> AuthResult[AccountInfo]:
        metadata = metadata or {}
        email = sanitize_email(email or "")
        error = self._validate_new_account(email, password)
        if error:
            return AuthResult(error=error)

        role = metadata.get("role") or "user"
        full_name = sanitize_name(metadata.get("full_name") or "") or None

        try:
            account = AuthAccount(email=email, password_hash=get_password_hash(password))
            self.db.add(account)
            self.db.flush()

            now = datetime.utcnow()
            profile = UserProfile(
                id=account.id,
                email=email,
                full_name=full_name,
                role=role,
                created_at=now,
                updated_at=now,
            )
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(account)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create account for {email}: {e}")
            orig = getattr(e, "orig", None)
            return AuthResult(error=AuthError(str(orig or e)))

        return AuthResult(data=AccountInfo(
            id=account.id,
            email=account.email,
            created_at=account.created_at,
            metadata={"full_name": full_name, "role": role},
        ))

    def sign_in(self, email: str, password: str) -> AuthResult[SessionInfo]:
        """Check credentials and open a new session."""
        email = sanitize_email(email or "")
        account = self.db.query(AuthAccount).filter(AuthAccount.email == email).first()
        if account is None or not verify_password(password or "", account.password_hash):
            logger.warning(f"Failed sign-in attempt for {email}")
            return AuthResult(error=AuthError(INVALID_CREDENTIALS, status=401))

        account.last_sign_in_at = datetime.utcnow()
        self.db.commit()
        return AuthResult(data=self._issue_session(account))

    def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> AuthResult[SessionInfo]:
        """Self-service registration. Always creates a plain `user` profile."""
        metadata = dict(metadata or {})
        metadata["role"] = "user"
        created = self._create(email, password, metadata)
        if not created.ok:
            return AuthResult(error=created.error)

        account = self.db.query(AuthAccount).filter(AuthAccount.id == created.data.id).first()
        return AuthResult(data=self._issue_session(account))

    def sign_out(self, access_token: str) -> AuthResult[None]:
        """Revoke the session token."""
        payload = verify_token(access_token)
        if payload is None or not payload.get("jti"):
            return AuthResult(error=AuthError("Invalid session", status=401))

        exp = payload.get("exp")
        blacklist_token(
            self.db,
            jti=payload["jti"],
            user_id=UUID(payload["sub"]),
            expires_at=datetime.utcfromtimestamp(exp) if exp else datetime.utcnow(),
        )
        return AuthResult()

    def get_session(self, access_token: Optional[str]) -> AuthResult[Optional[SessionInfo]]:
        """
        Resolve a token into a session.
        An absent, expired, revoked or orphaned token yields data=None, not an error.
        """
        if not access_token:
            return AuthResult(data=None)

        payload = verify_token(access_token)
        if payload is None:
            return AuthResult(data=None)

        jti = payload.get("jti")
        if not jti or is_token_blacklisted(self.db, jti):
            return AuthResult(data=None)

        try:
            user_id = UUID(payload.get("sub", ""))
        except ValueError:
            return AuthResult(data=None)

        account = self.db.query(AuthAccount).filter(AuthAccount.id == user_id).first()
        if account is None:
            return AuthResult(data=None)

        exp = payload.get("exp")
        return AuthResult(data=SessionInfo(
            user_id=account.id,
            email=account.email,
            access_token=access_token,
            jti=jti,
            expires_at=datetime.utcfromtimestamp(exp) if exp else datetime.utcnow(),
        ))

    # Privileged operations, reachable only from the admin user panel

    def create_account(self, email: str, password: str, metadata: Optional[dict] = None) -> AuthResult[AccountInfo]:
        """Create a confirmed account with its profile (role taken from metadata)."""
        result = self._create(email, password, metadata)
        if result.ok:
            logger.info(f"Account created for {result.data.email}")
        return result

    def delete_account(self, user_id: UUID) -> AuthResult[None]:
        """Delete an account and its profile."""
        if self.db.query(AuthAccount).filter(AuthAccount.id == user_id).first() is None:
            return AuthResult(error=AuthError("User not found", status=404))

        try:
            self.db.query(UserProfile).filter(UserProfile.id == user_id).delete()
            self.db.query(AuthAccount).filter(AuthAccount.id == user_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete account {user_id}: {e}")
            return AuthResult(error=AuthError("Failed to delete user"))

        logger.info(f"Account {user_id} deleted")
        return AuthResult()
