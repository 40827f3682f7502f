from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import get_client, get_workspace
from app.core.exceptions import (
    NotFoundError,
    OperationInProgressError,
    RemoteOperationError,
    ValidationError,
)
from app.panels.base import CONFLICT, VALIDATION, EntityPanel, PanelResult
from app.panels.workspace import AdminWorkspace
from app.schemas.panels import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ComponentResponse,
    KPIForm,
    KPIPanelResponse,
    PanelStateResponse,
    StatsPanelResponse,
    TaskForm,
    TaskPanelResponse,
    UserCreateForm,
    UserEditForm,
    UserPanelResponse,
    WebsiteStatForm,
)
from app.services.client import ServiceClient

router = APIRouter(prefix="/admin", tags=["admin"])


def raise_for_result(result: PanelResult) -> None:
    """Turn a failed panel operation into the matching HTTP error."""
    if result.ok:
        return
    if result.error_kind == VALIDATION:
        raise ValidationError(result.message)
    if result.error_kind == CONFLICT:
        raise OperationInProgressError(result.message)
    raise RemoteOperationError(result.message)


def _panel(workspace: AdminWorkspace, name: str) -> EntityPanel:
    panel = workspace.panel(name)
    if panel is None:
        raise NotFoundError("Panel")
    return panel


# Users

@router.get("/users", response_model=UserPanelResponse)
def list_users(
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Reload all user profiles, newest first."""
    workspace.users.load(client)
    return workspace.users.view()


@router.post("/users", response_model=UserPanelResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreateForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Create an account and its profile."""
    raise_for_result(workspace.users.create(client, data))
    return workspace.users.view()


@router.put("/users/{user_id}", response_model=UserPanelResponse)
def update_user(
    user_id: UUID,
    data: UserEditForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Change a user's name or role."""
    raise_for_result(workspace.users.update(client, user_id, data))
    return workspace.users.view()


@router.delete("/users/{user_id}", response_model=UserPanelResponse)
def delete_user(
    user_id: UUID,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Delete an account. Admins cannot delete themselves."""
    raise_for_result(workspace.users.delete(client, user_id))
    return workspace.users.view()


@router.post("/users/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_users(
    data: BulkDeleteRequest,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """
    Delete several accounts, or the current selection when no ids are given.
    Partial failures are reported in the body, not as an error status.
    """
    panel = workspace.users
    ids = data.ids if data.ids is not None else sorted(panel.selected_ids, key=str)

    result = panel.delete_many(client, ids)
    if result.error_kind == CONFLICT:
        raise OperationInProgressError(result.message)

    return BulkDeleteResponse(
        message=result.message,
        requested=len(set(ids)),
        failed_count=result.failed_count,
        failed_ids=result.failed_ids,
        panel=panel.view(),
    )


@router.post("/users/select-all", response_model=UserPanelResponse)
def select_all_users(workspace: AdminWorkspace = Depends(get_workspace)):
    """Select every loaded user, or clear the selection if all are selected."""
    workspace.users.select_all()
    return workspace.users.view()


@router.post("/users/{user_id}/select", response_model=UserPanelResponse)
def toggle_user_selection(
    user_id: UUID,
    workspace: AdminWorkspace = Depends(get_workspace),
):
    workspace.users.toggle_selection(user_id)
    return workspace.users.view()


# KPIs

@router.get("/kpis", response_model=KPIPanelResponse)
def list_kpis(
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    workspace.kpis.load(client)
    return workspace.kpis.view()


@router.post("/kpis", response_model=KPIPanelResponse, status_code=status.HTTP_201_CREATED)
def create_kpi(
    data: KPIForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.kpis.create(client, data))
    return workspace.kpis.view()


@router.put("/kpis/{kpi_id}", response_model=KPIPanelResponse)
def update_kpi(
    kpi_id: UUID,
    data: KPIForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Update a KPI. The key sent in the body is ignored."""
    raise_for_result(workspace.kpis.update(client, kpi_id, data))
    return workspace.kpis.view()


@router.delete("/kpis/{kpi_id}", response_model=KPIPanelResponse)
def delete_kpi(
    kpi_id: UUID,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.kpis.delete(client, kpi_id))
    return workspace.kpis.view()


# Tasks

@router.get("/tasks", response_model=TaskPanelResponse)
def list_tasks(
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    """Reload project activities together with their components."""
    workspace.tasks.load(client)
    return workspace.tasks.view()


@router.get("/tasks/components", response_model=list[ComponentResponse])
def list_components(
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.tasks.load_components(client))
    return workspace.tasks.components


@router.post("/tasks", response_model=TaskPanelResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.tasks.create(client, data))
    return workspace.tasks.view()


@router.put("/tasks/{task_id}", response_model=TaskPanelResponse)
def update_task(
    task_id: UUID,
    data: TaskForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.tasks.update(client, task_id, data))
    return workspace.tasks.view()


@router.delete("/tasks/{task_id}", response_model=TaskPanelResponse)
def delete_task(
    task_id: UUID,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.tasks.delete(client, task_id))
    return workspace.tasks.view()


# Website statistics

@router.get("/stats", response_model=StatsPanelResponse)
def list_stats(
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    workspace.stats.load(client)
    return workspace.stats.view()


@router.post("/stats", response_model=StatsPanelResponse, status_code=status.HTTP_201_CREATED)
def create_stat(
    data: WebsiteStatForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.stats.create(client, data))
    return workspace.stats.view()


@router.put("/stats/{stat_id}", response_model=StatsPanelResponse)
def update_stat(
    stat_id: UUID,
    data: WebsiteStatForm,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.stats.update(client, stat_id, data))
    return workspace.stats.view()


@router.delete("/stats/{stat_id}", response_model=StatsPanelResponse)
def delete_stat(
    stat_id: UUID,
    workspace: AdminWorkspace = Depends(get_workspace),
    client: ServiceClient = Depends(get_client),
):
    raise_for_result(workspace.stats.delete(client, stat_id))
    return workspace.stats.view()


# Form state, shared by all panels

@router.post("/{panel_name}/form/open", response_model=PanelStateResponse)
def open_form(
    panel_name: str,
    row_id: Optional[UUID] = None,
    workspace: AdminWorkspace = Depends(get_workspace),
):
    """Open the create form, or the edit form of `row_id` filled from the loaded rows."""
    panel = _panel(workspace, panel_name)
    if row_id is None:
        panel.open_create()
    elif not panel.open_edit(row_id):
        raise NotFoundError(panel.entity_title)
    return panel.view()


@router.post("/{panel_name}/form/close", response_model=PanelStateResponse)
def close_form(
    panel_name: str,
    workspace: AdminWorkspace = Depends(get_workspace),
):
    panel = _panel(workspace, panel_name)
    panel.close_form()
    return panel.view()
