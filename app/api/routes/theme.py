import logging
from dataclasses import asdict
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Request, Response

from app.core.config import settings
from app.schemas.theme import ThemeSetRequest, ThemeStateResponse, ThemeToggleRequest
from app.services.theme_service import (
    Point,
    ThemeTransitionController,
    TransitionPlan,
    Viewport,
    idle_snapshot,
    theme_registry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/theme", tags=["Theme"])

CLIENT_COOKIE_NAME = "theme_client"
ONE_YEAR = 365 * 24 * 60 * 60


def _controller(request: Request, response: Response) -> ThemeTransitionController:
    """Controller for this browser, seeded from the stored theme preference."""
    client_id = request.cookies.get(CLIENT_COOKIE_NAME)
    if not client_id:
        client_id = uuid4().hex
        response.set_cookie(CLIENT_COOKIE_NAME, client_id, max_age=ONE_YEAR, httponly=True, samesite="lax")
    return theme_registry.get(client_id, stored_theme=request.cookies.get(settings.THEME_COOKIE_NAME))


def _geometry(data: ThemeToggleRequest) -> tuple[Optional[Point], Optional[Viewport]]:
    origin = Point(data.origin.x, data.origin.y) if data.origin else None
    viewport = Viewport(data.viewport.width, data.viewport.height) if data.viewport else None
    return origin, viewport


def _state(
    controller: ThemeTransitionController,
    response: Response,
    plan: Optional[TransitionPlan] = None,
) -> ThemeStateResponse:
    if plan is not None:
        # The preference is stored as soon as the transition starts
        response.set_cookie(
            settings.THEME_COOKIE_NAME,
            plan.target_theme,
            max_age=ONE_YEAR,
            samesite="lax",
        )
    return ThemeStateResponse(
        **controller.snapshot(),
        transition=asdict(plan) if plan else None,
    )


@router.get("", response_model=ThemeStateResponse)
def get_theme(request: Request, response: Response):
    """Current theme. Browsers that never toggled get a snapshot of their stored preference."""
    controller = theme_registry.peek(request.cookies.get(CLIENT_COOKIE_NAME))
    if controller is None:
        return ThemeStateResponse(**idle_snapshot(request.cookies.get(settings.THEME_COOKIE_NAME)))
    return _state(controller, response)


@router.post("/toggle", response_model=ThemeStateResponse)
def toggle_theme(request: Request, response: Response, data: Optional[ThemeToggleRequest] = None):
    """
    Start a circular reveal towards the other theme.
    While a transition is running the request is ignored and `transition` is null.
    """
    controller = _controller(request, response)
    plan = controller.toggle_theme(*_geometry(data or ThemeToggleRequest()))
    return _state(controller, response, plan)


@router.post("/set", response_model=ThemeStateResponse)
def set_theme(data: ThemeSetRequest, request: Request, response: Response):
    """Transition to the requested theme. Nothing happens if it is already active."""
    controller = _controller(request, response)
    plan = controller.set_theme_with_transition(data.theme, *_geometry(data))
    return _state(controller, response, plan)
