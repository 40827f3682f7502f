from app.panels.base import EntityPanel, InFlightRegistry, Notification, PanelResult
from app.panels.kpis import KPIPanel
from app.panels.stats import StatsPanel
from app.panels.tasks import TaskPanel
from app.panels.users import UserPanel
from app.panels.workspace import AdminWorkspace, WorkspaceRegistry, workspace_registry

__all__ = [
    "EntityPanel",
    "InFlightRegistry",
    "Notification",
    "PanelResult",
    "KPIPanel",
    "StatsPanel",
    "TaskPanel",
    "UserPanel",
    "AdminWorkspace",
    "WorkspaceRegistry",
    "workspace_registry",
]
