"""Authentication state shared by every consumer of one browser session."""

import enum
import logging
from typing import Callable, Optional
from uuid import UUID

from app.core.access_policy import ANONYMOUS, Principal
from app.services.client import ServiceClient
from app.services.data_service import DataService
from app.services.identity_service import AuthResult, SessionInfo

logger = logging.getLogger(__name__)


class AuthStatus(str, enum.Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


def fetch_profile(data: DataService, user_id: UUID) -> Optional[dict]:
    """Look up a profile row. A failed lookup counts as no profile."""
    result = data.select_one("user_profiles", {"id": user_id})
    if not result.ok:
        logger.warning(f"Profile lookup failed for {user_id}: {result.error.message}")
        return None
    return result.data


class AuthContext:
    """
    `{user, profile, loading, is_admin}` for one browser session.

    Lifecycle: UNRESOLVED (loading) -> AUTHENTICATED | ANONYMOUS once
    `resolve` has looked up the session and profile. Sign-in, sign-up and
    sign-out are the only writers; everybody else reads, or subscribes to be
    told about changes.
    """

    def __init__(self, client: ServiceClient):
        self.client = client
        self.status = AuthStatus.UNRESOLVED
        self.user: Optional[SessionInfo] = None
        self.profile: Optional[dict] = None
        self._subscribers: list[Callable[["AuthContext"], None]] = []

    @property
    def loading(self) -> bool:
        return self.status == AuthStatus.UNRESOLVED

    @property
    def is_admin(self) -> bool:
        # Read from the profile every time so a role change is seen immediately
        return bool(self.profile) and self.profile.get("role") == "admin"

    @property
    def principal(self) -> Principal:
        if self.user is None:
            return ANONYMOUS
        return Principal(authenticated=True, role=self.profile.get("role") if self.profile else None)

    def subscribe(self, callback: Callable[["AuthContext"], None]) -> Callable[[], None]:
        """Register a state-change listener. Returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, user: Optional[SessionInfo], profile: Optional[dict]) -> None:
        self.user = user
        self.profile = profile
        self.status = AuthStatus.AUTHENTICATED if user else AuthStatus.ANONYMOUS
        for callback in list(self._subscribers):
            callback(self)

    def _load(self, session: Optional[SessionInfo]) -> None:
        profile = fetch_profile(self.client.data, session.user_id) if session else None
        self._set_state(session, profile)

    def resolve(self, access_token: Optional[str]) -> "AuthContext":
        """Look up session and profile for the token and leave the loading state."""
        result = self.client.auth.get_session(access_token)
        self._load(result.data if result.ok else None)
        return self

    def sign_in(self, email: str, password: str) -> AuthResult[SessionInfo]:
        result = self.client.auth.sign_in(email, password)
        if result.ok:
            self._load(result.data)
        return result

    def sign_up(self, email: str, password: str, full_name: str) -> AuthResult[SessionInfo]:
        result = self.client.auth.sign_up(email, password, {"full_name": full_name})
        if result.ok:
            self._load(result.data)
        return result

    def sign_out(self) -> AuthResult[None]:
        if self.user is None:
            self._set_state(None, None)
            return AuthResult()

        result = self.client.auth.sign_out(self.user.access_token)
        if result.ok:
            self._set_state(None, None)
        return result

    def snapshot(self) -> dict:
        return {
            "status": self.status.value,
            "loading": self.loading,
            "user": {"id": self.user.user_id, "email": self.user.email} if self.user else None,
            "profile": self.profile,
            "is_admin": self.is_admin,
        }
