from typing import Literal, Optional

from pydantic import BaseModel, Field


ThemeName = Literal["light", "dark"]


class PointSchema(BaseModel):
    x: float
    y: float


class ViewportSchema(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class ThemeToggleRequest(BaseModel):
    origin: Optional[PointSchema] = None
    viewport: Optional[ViewportSchema] = None


class ThemeSetRequest(ThemeToggleRequest):
    # Anything other than "dark" means light
    theme: str


class TransitionPlanResponse(BaseModel):
    origin: PointSchema
    target_theme: ThemeName
    radius: float
    flip_delay_ms: int
    duration_ms: int


class ThemeStateResponse(BaseModel):
    theme: ThemeName
    state: str
    is_transitioning: bool
    overlay_theme: ThemeName
    overlay_origin: Optional[PointSchema] = None
    transition: Optional[TransitionPlanResponse] = None
