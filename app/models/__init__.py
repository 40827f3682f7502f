from app.models.auth_account import AuthAccount
from app.models.user_profile import UserProfile
from app.models.dashboard_kpi import DashboardKPI
from app.models.project import ProjectComponent, ProjectActivity
from app.models.website_stat import WebsiteStat
from app.models.token_blacklist import TokenBlacklist

__all__ = [
    "AuthAccount",
    "UserProfile",
    "DashboardKPI",
    "ProjectComponent",
    "ProjectActivity",
    "WebsiteStat",
    "TokenBlacklist",
]
