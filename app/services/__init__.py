from app.services.data_service import DataService, DataResult, DataError
from app.services.identity_service import IdentityService, AuthResult, AuthError
from app.services.client import ServiceClient
from app.services.auth_context import AuthContext, AuthStatus
from app.services.theme_service import ThemeTransitionController, theme_registry

__all__ = [
    "DataService",
    "DataResult",
    "DataError",
    "IdentityService",
    "AuthResult",
    "AuthError",
    "ServiceClient",
    "AuthContext",
    "AuthStatus",
    "ThemeTransitionController",
    "theme_registry",
]
