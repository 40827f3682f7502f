"""Tests for the theme transition controller and the theme API."""

import math
from datetime import datetime, timedelta

import pytest
from fastapi import status

from app.services.theme_service import (
    DARK,
    LIGHT,
    Point,
    ThemeRegistry,
    ThemeTransitionController,
    TransitionState,
    Viewport,
    reveal_radius,
    sanitize_theme,
    theme_registry,
)


@pytest.fixture
def controller(manual_scheduler):
    return ThemeTransitionController(manual_scheduler, flip_delay_ms=100, duration_ms=600)


class TestHelpers:

    def test_sanitize_theme(self):
        assert sanitize_theme("dark") == DARK
        assert sanitize_theme("light") == LIGHT
        assert sanitize_theme("sepia") == LIGHT
        assert sanitize_theme(None) == LIGHT

    def test_reveal_radius_covers_viewport(self):
        radius = reveal_radius(Viewport(300, 400), multiplier=1.5)

        assert radius == pytest.approx(750)

    def test_viewport_center(self):
        assert Viewport(1000, 600).center == Point(500, 300)


class TestThemeTransitionController:
    """IDLE -> TRANSITIONING -> IDLE."""

    def test_starts_light_and_idle(self, controller):
        assert controller.theme == LIGHT
        assert controller.state == TransitionState.IDLE

    def test_stored_theme_is_sanitized(self, manual_scheduler):
        assert ThemeTransitionController(manual_scheduler, theme="dark").theme == DARK
        assert ThemeTransitionController(manual_scheduler, theme="blue").theme == LIGHT

    def test_toggle_flips_after_delay(self, controller, manual_scheduler):
        plan = controller.toggle_theme(Point(10, 20), Viewport(800, 600))

        assert plan.target_theme == DARK
        assert plan.origin == Point(10, 20)
        assert plan.radius == pytest.approx(math.hypot(800, 600) * 1.5)
        assert controller.is_transitioning
        assert controller.overlay_theme == DARK
        # The old theme stays until the overlay has started growing
        assert controller.theme == LIGHT

        manual_scheduler.advance(0.1)
        assert controller.theme == DARK
        assert controller.is_transitioning

        manual_scheduler.advance(0.6)
        assert controller.state == TransitionState.IDLE
        assert controller.overlay_origin is None

    def test_origin_defaults_to_viewport_center(self, controller):
        plan = controller.toggle_theme(viewport=Viewport(800, 600))

        assert plan.origin == Point(400, 300)

    def test_toggle_while_transitioning_is_ignored(self, controller, manual_scheduler):
        controller.toggle_theme()

        assert controller.toggle_theme() is None
        assert len(manual_scheduler.pending) == 2

        manual_scheduler.run_all()
        assert controller.theme == DARK

    def test_toggle_back_after_transition(self, controller, manual_scheduler):
        controller.toggle_theme()
        manual_scheduler.run_all()

        plan = controller.toggle_theme()
        manual_scheduler.run_all()

        assert plan.target_theme == LIGHT
        assert controller.theme == LIGHT

    def test_set_current_theme_is_noop(self, controller, manual_scheduler):
        assert controller.set_theme_with_transition(LIGHT) is None
        assert manual_scheduler.pending == []
        assert controller.state == TransitionState.IDLE

    def test_set_theme(self, controller, manual_scheduler):
        plan = controller.set_theme_with_transition(DARK)
        manual_scheduler.run_all()

        assert plan.target_theme == DARK
        assert controller.theme == DARK

    def test_snapshot(self, controller):
        controller.toggle_theme(Point(5, 6))

        snapshot = controller.snapshot()
        assert snapshot["state"] == "transitioning"
        assert snapshot["overlay_origin"] == {"x": 5, "y": 6}


class TestThemeRegistry:

    def test_one_controller_per_client(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler)

        first = registry.get("a", stored_theme="dark")
        assert registry.get("a") is first
        assert registry.get("b") is not first
        assert first.theme == DARK

    def test_evicts_least_recently_used(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler, max_size=2)

        first = registry.get("a")
        registry.get("b")
        registry.get("a")
        registry.get("c")

        assert len(registry) == 2
        assert registry.peek("a") is first
        assert registry.peek("b") is None

    def test_eviction_spares_running_transition(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler, max_size=1)

        busy = registry.get("a")
        busy.toggle_theme()
        registry.get("b")

        assert registry.peek("a") is busy
        assert registry.peek("b") is None

    def test_peek_never_creates(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler)

        assert registry.peek("a") is None
        assert registry.peek(None) is None
        assert len(registry) == 0

    def test_prune_drops_idle_controllers(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler)
        registry.get("idle")
        busy = registry.get("busy")
        busy.toggle_theme()

        later = datetime.utcnow() + timedelta(hours=2)
        assert registry.prune(timedelta(minutes=60), now=later) == 1
        assert registry.peek("idle") is None
        assert registry.peek("busy") is busy

    def test_prune_keeps_recent_controllers(self, manual_scheduler):
        registry = ThemeRegistry(schedule=manual_scheduler)
        registry.get("a")

        assert registry.prune(timedelta(minutes=60)) == 0
        assert len(registry) == 1


class TestThemeEndpoints:

    def test_get_theme_defaults_to_light(self, client):
        response = client.get("/api/theme")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["theme"] == "light"
        assert data["state"] == "idle"
        assert data["transition"] is None
        assert "theme_client" not in response.cookies

    def test_get_theme_does_not_register_clients(self, client):
        for _ in range(25):
            client.cookies.clear()
            assert client.get("/api/theme").status_code == status.HTTP_200_OK

        assert len(theme_registry) == 0

    def test_get_theme_reads_stored_preference(self, client):
        client.cookies.set("theme", "dark")

        data = client.get("/api/theme").json()
        assert data["theme"] == "dark"
        assert data["state"] == "idle"
        assert len(theme_registry) == 0

    def test_toggle_registers_client(self, client):
        response = client.post("/api/theme/toggle")

        assert "theme_client" in response.cookies
        assert len(theme_registry) == 1

    def test_toggle_without_body(self, client, manual_scheduler):
        response = client.post("/api/theme/toggle")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["is_transitioning"] is True
        assert data["transition"]["target_theme"] == "dark"
        assert response.cookies.get("theme") == "dark"

        manual_scheduler.run_all()
        assert client.get("/api/theme").json()["theme"] == "dark"

    def test_toggle_with_geometry(self, client):
        response = client.post(
            "/api/theme/toggle",
            json={"origin": {"x": 40, "y": 30}, "viewport": {"width": 300, "height": 400}},
        )

        transition = response.json()["transition"]
        assert transition["origin"] == {"x": 40, "y": 30}
        assert transition["radius"] == pytest.approx(750)
        assert transition["flip_delay_ms"] == 100
        assert transition["duration_ms"] == 600

    def test_second_toggle_during_transition(self, client):
        client.post("/api/theme/toggle")
        response = client.post("/api/theme/toggle")

        assert response.json()["transition"] is None
        assert response.json()["overlay_theme"] == "dark"

    def test_set_theme(self, client, manual_scheduler):
        response = client.post("/api/theme/set", json={"theme": "dark"})
        assert response.json()["transition"]["target_theme"] == "dark"

        manual_scheduler.run_all()
        response = client.post("/api/theme/set", json={"theme": "dark"})
        assert response.json()["transition"] is None
        assert response.json()["theme"] == "dark"

    def test_invalid_viewport(self, client):
        response = client.post("/api/theme/toggle", json={"viewport": {"width": 0, "height": 10}})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_script_reveals_from_pointer(self, client):
        response = client.get("/static/theme.js")

        assert response.status_code == status.HTTP_200_OK
        assert "event.clientX" in response.text
        assert "getBoundingClientRect" in response.text
