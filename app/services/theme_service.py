"""
Light/dark theme switching with a circular reveal transition.

The controller is a small state machine, IDLE -> TRANSITIONING -> IDLE. A
toggle captures where the reveal starts, flips the stored preference a
moment after the overlay appears (so the old theme is still visible under
the expanding mask), and returns to IDLE once the animation is over.
"""

import enum
import logging
import math
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

LIGHT = "light"
DARK = "dark"
DEFAULT_THEME = LIGHT

# (delay_seconds, callback) -> None
Scheduler = Callable[[float, Callable[[], None]], None]


def sanitize_theme(value: Optional[str]) -> str:
    return DARK if value == DARK else LIGHT


class TransitionState(str, enum.Enum):
    IDLE = "idle"
    TRANSITIONING = "transitioning"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)


DEFAULT_VIEWPORT = Viewport(1280, 800)


def reveal_radius(viewport: Viewport, multiplier: Optional[float] = None) -> float:
    """Radius that covers the whole viewport from any origin inside it."""
    if multiplier is None:
        multiplier = settings.THEME_RADIUS_MULTIPLIER
    return math.hypot(viewport.width, viewport.height) * multiplier


@dataclass(frozen=True)
class TransitionPlan:
    origin: Point
    target_theme: str
    radius: float
    flip_delay_ms: int
    duration_ms: int


class ThemeTransitionController:

    def __init__(
        self,
        schedule: Scheduler,
        theme: Optional[str] = None,
        flip_delay_ms: Optional[int] = None,
        duration_ms: Optional[int] = None,
    ):
        self._schedule = schedule
        self._lock = threading.Lock()
        self.theme = sanitize_theme(theme or DEFAULT_THEME)
        self.state = TransitionState.IDLE
        self.overlay_theme = DEFAULT_THEME
        self.overlay_origin: Optional[Point] = None
        self.flip_delay_ms = flip_delay_ms if flip_delay_ms is not None else settings.THEME_FLIP_DELAY_MS
        self.duration_ms = duration_ms if duration_ms is not None else settings.THEME_TRANSITION_MS

    @property
    def is_transitioning(self) -> bool:
        return self.state == TransitionState.TRANSITIONING

    def _start(self, target: str, origin: Optional[Point], viewport: Optional[Viewport]) -> Optional[TransitionPlan]:
        viewport = viewport or DEFAULT_VIEWPORT
        with self._lock:
            if self.state == TransitionState.TRANSITIONING:
                return None

            origin = origin or viewport.center
            self.overlay_origin = origin
            self.overlay_theme = target
            self.state = TransitionState.TRANSITIONING

        logger.debug(f"Theme transition to {target} from ({origin.x}, {origin.y})")
        self._schedule(self.flip_delay_ms / 1000, lambda: self._flip(target))
        self._schedule(self.duration_ms / 1000, self._finish)

        return TransitionPlan(
            origin=origin,
            target_theme=target,
            radius=reveal_radius(viewport),
            flip_delay_ms=self.flip_delay_ms,
            duration_ms=self.duration_ms,
        )

    def _flip(self, target: str) -> None:
        with self._lock:
            self.theme = target

    def _finish(self) -> None:
        with self._lock:
            self.state = TransitionState.IDLE
            self.overlay_origin = None

    def toggle_theme(
        self,
        origin: Optional[Point] = None,
        viewport: Optional[Viewport] = None,
    ) -> Optional[TransitionPlan]:
        """Start a transition to the opposite theme. No-op while one is running."""
        target = DARK if self.theme == LIGHT else LIGHT
        return self._start(target, origin, viewport)

    def set_theme_with_transition(
        self,
        target: str,
        origin: Optional[Point] = None,
        viewport: Optional[Viewport] = None,
    ) -> Optional[TransitionPlan]:
        """Transition to `target` unless it is already the current theme."""
        target = sanitize_theme(target)
        if target == self.theme:
            return None
        return self._start(target, origin, viewport)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "theme": self.theme,
                "state": self.state.value,
                "is_transitioning": self.state == TransitionState.TRANSITIONING,
                "overlay_theme": self.overlay_theme,
                "overlay_origin": (
                    {"x": self.overlay_origin.x, "y": self.overlay_origin.y}
                    if self.overlay_origin else None
                ),
            }


def idle_snapshot(stored_theme: Optional[str] = None) -> dict:
    """State of a browser with no controller yet: idle, showing its stored theme."""
    return {
        "theme": sanitize_theme(stored_theme),
        "state": TransitionState.IDLE.value,
        "is_transitioning": False,
        "overlay_theme": DEFAULT_THEME,
        "overlay_origin": None,
    }


class ThemeRegistry:
    """
    One controller per browser client, created on first transition.

    At most `max_size` controllers are kept; the least recently used idle one
    is evicted first. `prune` drops controllers unused for a while.
    """

    def __init__(self, schedule: Optional[Scheduler] = None, max_size: Optional[int] = None):
        self._controllers: OrderedDict[str, ThemeTransitionController] = OrderedDict()
        self._last_used: dict[str, datetime] = {}
        self._lock = threading.Lock()
        self.schedule = schedule
        self.max_size = max_size or settings.THEME_REGISTRY_SIZE

    def _scheduler(self) -> Scheduler:
        if self.schedule is not None:
            return self.schedule
        from app.core.scheduler import schedule_once
        return schedule_once

    def _touch(self, client_id: str) -> None:
        self._controllers.move_to_end(client_id)
        self._last_used[client_id] = datetime.utcnow()

    def _remove(self, client_id: str) -> None:
        self._controllers.pop(client_id, None)
        self._last_used.pop(client_id, None)

    def _evict(self) -> None:
        while len(self._controllers) > self.max_size:
            victim = next(
                (cid for cid, c in self._controllers.items() if not c.is_transitioning),
                next(iter(self._controllers)),
            )
            self._remove(victim)
            logger.debug(f"Theme controller for client {victim} evicted")

    def peek(self, client_id: Optional[str]) -> Optional[ThemeTransitionController]:
        """Existing controller for the client, or None. Never creates one."""
        if not client_id:
            return None
        with self._lock:
            controller = self._controllers.get(client_id)
            if controller is not None:
                self._touch(client_id)
            return controller

    def get(self, client_id: str, stored_theme: Optional[str] = None) -> ThemeTransitionController:
        with self._lock:
            controller = self._controllers.get(client_id)
            if controller is None:
                controller = ThemeTransitionController(self._scheduler(), theme=stored_theme)
                self._controllers[client_id] = controller
            self._touch(client_id)
            self._evict()
            return controller

    def prune(self, max_idle: Optional[timedelta] = None, now: Optional[datetime] = None) -> int:
        """Drop idle controllers not used within `max_idle`. Returns how many were removed."""
        if max_idle is None:
            max_idle = timedelta(minutes=settings.THEME_CONTROLLER_IDLE_MINUTES)
        cutoff = (now or datetime.utcnow()) - max_idle
        with self._lock:
            stale = [
                cid for cid, controller in self._controllers.items()
                if self._last_used.get(cid, cutoff) <= cutoff and not controller.is_transitioning
            ]
            for client_id in stale:
                self._remove(client_id)
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._controllers.clear()
            self._last_used.clear()

    def __len__(self) -> int:
        return len(self._controllers)


theme_registry = ThemeRegistry()
