from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


# Form schemas: the editable fields of each panel with their empty-form
# defaults. Only types are coerced here; required-field checks belong to the
# panels so a missing field never reaches the data store.

class PanelForm(BaseModel):
    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_default(cls, value: Any, info):
        # An empty input box means "use the default" for non-text fields
        if isinstance(value, str) and not value.strip():
            field = cls.model_fields[info.field_name]
            if field.annotation is not str:
                return field.default
        return value


class UserCreateForm(PanelForm):
    full_name: str = ""
    email: str = ""
    password: str = ""
    role: str = "user"


class UserEditForm(PanelForm):
    full_name: str = ""
    role: str = "user"


class KPIForm(PanelForm):
    key: str = ""
    label: str = ""
    value: float = 0
    unit: str = ""
    change: str = ""
    trend: str = "neutral"
    icon: str = ""
    color: str = ""
    order: int = 0
    is_active: bool = True


class TaskForm(PanelForm):
    component_id: Optional[UUID] = None
    activity_name: str = ""
    responsible: str = ""
    status: str = "Non démarré"
    priority: str = "normal"
    progress: int = 0
    tdr_done: bool = False
    marche_done: bool = False
    contract_done: bool = False
    comment: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_allocated: Optional[float] = 0
    budget_spent: Optional[float] = 0
    order: int = 0


class WebsiteStatForm(PanelForm):
    metric_name: str = ""
    metric_value: float = 0
    metric_type: str = "user"
    description: str = ""


class BulkDeleteRequest(BaseModel):
    ids: Optional[list[UUID]] = Field(
        default=None,
        description="Rows to delete. When omitted, the panel's current selection is used.",
    )


# Row responses

class UserProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str]
    role: str
    role_label: str = ""
    status: str = ""
    avatar_url: Optional[str]
    created_at: datetime
    updated_at: datetime


class KPIResponse(BaseModel):
    id: UUID
    key: str
    label: str
    value: float
    display_value: str = ""
    unit: Optional[str]
    change: Optional[str]
    trend: Optional[str]
    icon: Optional[str]
    color: Optional[str]
    order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ComponentResponse(BaseModel):
    id: UUID
    name: str
    order: int = 0


class TaskResponse(BaseModel):
    id: UUID
    component_id: Optional[UUID]
    component_name: Optional[str] = None
    activity_name: str
    responsible: Optional[str]
    status: str
    priority: str
    progress: int
    tdr_done: bool
    marche_done: bool
    contract_done: bool
    comment: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    budget_allocated: Optional[float]
    budget_spent: Optional[float]
    order: int
    created_at: datetime
    updated_at: datetime


class WebsiteStatResponse(BaseModel):
    id: UUID
    metric_name: str
    metric_value: float
    display_value: str = ""
    metric_type: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime


# Panel state responses

class NotificationResponse(BaseModel):
    title: str
    description: str
    variant: str
    created_at: datetime


class PanelStateResponse(BaseModel):
    total: int
    loading: bool
    saving: bool
    form_open: bool
    editing_id: Optional[UUID] = None
    form: dict[str, Any]
    notifications: list[NotificationResponse] = []


class UserPanelResponse(PanelStateResponse):
    rows: list[UserProfileResponse]
    selected_ids: list[UUID] = []


class KPIPanelResponse(PanelStateResponse):
    rows: list[KPIResponse]


class TaskPanelResponse(PanelStateResponse):
    rows: list[TaskResponse]
    components: list[ComponentResponse] = []


class StatsPanelResponse(PanelStateResponse):
    rows: list[WebsiteStatResponse]


class BulkDeleteResponse(BaseModel):
    message: str
    requested: int
    failed_count: int
    failed_ids: list[UUID] = []
    panel: UserPanelResponse


class WebsiteStatListResponse(BaseModel):
    stats: list[WebsiteStatResponse]
    total: int


class WebsiteStatValueResponse(BaseModel):
    metric_name: str
    metric_value: float
