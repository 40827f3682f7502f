"""
Routing-by-role policy.

This is the one place that decides who may see which page. The session gate
middleware and the page/API guards all call `evaluate_access`, so the rules
cannot drift apart.
"""

from dataclasses import dataclass
from typing import Optional


LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
ADMIN_HOME = "/admin"
USER_HOME = "/dashboard"

AUTH_PAGES = frozenset({LOGIN_PATH, REGISTER_PATH})
ADMIN_AREA_PREFIX = "/admin"

ALLOW = "allow"
REDIRECT = "redirect"


@dataclass(frozen=True)
class Principal:
    """Who is asking: whether a session exists and the role stored on the profile."""
    authenticated: bool = False
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.authenticated and self.role == "admin"


ANONYMOUS = Principal()


@dataclass(frozen=True)
class AccessDecision:
    action: str
    location: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.action == ALLOW


def home_for(principal: Principal) -> str:
    """Landing page for an authenticated principal."""
    return ADMIN_HOME if principal.is_admin else USER_HOME


def is_auth_page(path: str) -> bool:
    return path.rstrip("/") in AUTH_PAGES


def is_admin_area(path: str) -> bool:
    return path == ADMIN_AREA_PREFIX or path.startswith(ADMIN_AREA_PREFIX + "/")


def evaluate_access(path: str, principal: Principal) -> AccessDecision:
    """
    Decide whether `path` is served or redirected.

    - no session, not an auth page: redirect to the login page
    - session on an auth page: redirect to the principal's home
    - session in the admin area without the admin role: redirect to the dashboard
    - anything else is allowed
    """
    if not principal.authenticated:
        if is_auth_page(path):
            return AccessDecision(ALLOW)
        return AccessDecision(REDIRECT, LOGIN_PATH)

    if is_auth_page(path):
        return AccessDecision(REDIRECT, home_for(principal))

    if is_admin_area(path) and not principal.is_admin:
        return AccessDecision(REDIRECT, USER_HOME)

    return AccessDecision(ALLOW)
