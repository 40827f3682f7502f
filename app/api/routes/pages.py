"""Browser pages. Each page is guarded by the same access policy as the session gate."""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.api.deps import get_client, require_page_access
from app.core.access_policy import home_for
from app.core.config import settings
from app.panels.kpis import format_kpi_value
from app.panels.stats import format_stat_value
from app.panels.tasks import STATUS_OPTIONS
from app.panels.workspace import workspace_registry
from app.services.auth_context import AuthContext
from app.services.client import ServiceClient
from app.services.theme_service import sanitize_theme

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

ADMIN_TABS = (
    ("users", "Utilisateurs"),
    ("kpis", "KPIs"),
    ("tasks", "Tâches"),
    ("stats", "Statistiques"),
    ("charts", "Graphiques"),
)


def _context(request: Request, auth: AuthContext, **extra) -> dict:
    return {
        "theme": sanitize_theme(request.cookies.get(settings.THEME_COOKIE_NAME)),
        "auth": auth.snapshot(),
        **extra,
    }


@router.get("/", include_in_schema=False)
def index(auth: AuthContext = Depends(require_page_access)):
    """Send the browser to its landing page."""
    return RedirectResponse(url=home_for(auth.principal), status_code=307)


@router.get("/login", response_class=HTMLResponse, include_in_schema=False)
def login_page(request: Request, auth: AuthContext = Depends(require_page_access)):
    return templates.TemplateResponse(request, "login.html", _context(request, auth))


@router.get("/register", response_class=HTMLResponse, include_in_schema=False)
def register_page(request: Request, auth: AuthContext = Depends(require_page_access)):
    return templates.TemplateResponse(request, "register.html", _context(request, auth))


@router.get("/dashboard", response_class=HTMLResponse, include_in_schema=False)
def dashboard_page(
    request: Request,
    auth: AuthContext = Depends(require_page_access),
    client: ServiceClient = Depends(get_client),
):
    """Active KPIs and website statistics for every signed-in user."""
    kpis = client.data.select("dashboard_kpis", filters={"is_active": True}, order="order")
    stats = client.data.select("website_stats", order="metric_name")

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        _context(
            request,
            auth,
            kpis=[{**k, "display_value": format_kpi_value(k["value"], k["unit"])} for k in kpis.data or []],
            stats=[
                {**s, "display_value": format_stat_value(s["metric_value"], s["metric_type"])}
                for s in stats.data or []
            ],
            load_error=None if kpis.ok and stats.ok else "Impossible de charger les données du tableau de bord",
        ),
    )


@router.get("/admin", response_class=HTMLResponse, include_in_schema=False)
def admin_page(
    request: Request,
    auth: AuthContext = Depends(require_page_access),
    client: ServiceClient = Depends(get_client),
):
    """Admin console. Panels are loaded once here and refreshed through the admin API."""
    workspace = workspace_registry.get(
        auth.user.jti, user_id=auth.user.user_id, expires_at=auth.user.expires_at
    )
    for panel in (workspace.users, workspace.kpis, workspace.tasks, workspace.stats):
        panel.load(client)

    return templates.TemplateResponse(
        request,
        "admin.html",
        _context(
            request,
            auth,
            tabs=ADMIN_TABS,
            users=workspace.users.view(),
            kpis=workspace.kpis.view(),
            tasks=workspace.tasks.view(),
            stats=workspace.stats.view(),
            status_options=STATUS_OPTIONS,
        ),
    )
