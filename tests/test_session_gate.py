"""Tests for the session gate middleware and page guards."""

from fastapi import status


class TestSessionGate:
    """Page navigations are redirected before anything is rendered."""

    def test_anonymous_dashboard_redirects_to_login(self, client):
        response = client.get("/dashboard", follow_redirects=False)
        assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
        assert response.headers["location"] == "/login"

    def test_anonymous_admin_redirects_to_login(self, client):
        response = client.get("/admin", follow_redirects=False)
        assert response.headers["location"] == "/login"

    def test_anonymous_sees_login_page(self, client):
        response = client.get("/login")
        assert response.status_code == status.HTTP_200_OK
        assert "login-form" in response.text

    def test_anonymous_sees_register_page(self, client):
        response = client.get("/register")
        assert response.status_code == status.HTTP_200_OK
        assert "register-form" in response.text

    def test_admin_on_login_goes_to_admin(self, admin_client):
        response = admin_client.get("/login", follow_redirects=False)
        assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
        assert response.headers["location"] == "/admin"

    def test_reader_on_login_goes_to_dashboard(self, user_client):
        response = user_client.get("/login", follow_redirects=False)
        assert response.headers["location"] == "/dashboard"

    def test_reader_on_admin_goes_to_dashboard(self, user_client):
        response = user_client.get("/admin", follow_redirects=False)
        assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
        assert response.headers["location"] == "/dashboard"

    def test_root_redirects_to_landing_page(self, admin_client, user_client):
        assert admin_client.get("/", follow_redirects=False).headers["location"] == "/admin"
        assert user_client.get("/", follow_redirects=False).headers["location"] == "/dashboard"

    def test_revoked_session_is_anonymous(self, admin_client):
        token = admin_client.cookies.get("dashboard_session")
        admin_client.post("/api/auth/logout")

        # Replaying the old cookie after sign-out does not work
        response = admin_client.get(
            "/admin", headers={"Cookie": f"dashboard_session={token}"}, follow_redirects=False
        )
        assert response.headers["location"] == "/login"

    def test_garbage_cookie_is_anonymous(self, client):
        response = client.get(
            "/dashboard", headers={"Cookie": "dashboard_session=not-a-token"}, follow_redirects=False
        )
        assert response.headers["location"] == "/login"

    def test_excluded_paths_pass_through(self, client):
        assert client.get("/health").status_code == status.HTTP_200_OK
        assert client.get("/static/style.css").status_code == status.HTTP_200_OK
        # The API answers with its own status codes instead of redirecting
        assert client.get("/api/auth/me").status_code == status.HTTP_401_UNAUTHORIZED


class TestPages:

    def test_dashboard_lists_active_kpis(self, user_client, db_session, sample_kpi, sample_stats):
        response = user_client.get("/dashboard")
        assert response.status_code == status.HTTP_200_OK
        assert "Exécution budgétaire" in response.text
        assert "42 %" in response.text
        assert "Visiteurs" in response.text

    def test_admin_page_renders_tabs(self, admin_client, sample_kpi, sample_task, sample_stats):
        response = admin_client.get("/admin")
        assert response.status_code == status.HTTP_200_OK
        for tab in ('data-tab="users"', 'data-tab="kpis"', 'data-tab="tasks"', 'data-tab="stats"', 'data-tab="charts"'):
            assert tab in response.text
        assert "budget_execution" in response.text
        assert "Atelier de lancement" in response.text

    def test_pages_carry_security_headers(self, client):
        response = client.get("/login")
        assert response.headers["x-frame-options"] == "DENY"
        assert "script-src 'self'" in response.headers["content-security-policy"]
