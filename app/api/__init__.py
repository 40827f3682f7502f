from app.api.routes.auth import router as auth_router
from app.api.routes.admin import router as admin_router
from app.api.routes.website_stats import router as website_stats_router
from app.api.routes.theme import router as theme_router
from app.api.routes.pages import router as pages_router

__all__ = ["auth_router", "admin_router", "website_stats_router", "theme_router", "pages_router"]
