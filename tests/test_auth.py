"""Tests for authentication endpoints."""

import pytest
from fastapi import status

ADMIN_EMAIL = "admin@test.com"
USER_EMAIL = "reader@test.com"
PASSWORD = "Password123"


@pytest.fixture
def registration_data():
    """Sample self-registration data."""
    return {
        "full_name": "Nouvel Utilisateur",
        "email": "new@test.com",
        "password": "Password123",
        "confirm_password": "Password123",
    }


class TestAuthEndpoints:
    """Test authentication flow."""

    def test_register(self, client, registration_data):
        """Registration creates a reader account and signs it in."""
        response = client.post("/api/auth/register", json=registration_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["status"] == "authenticated"
        assert data["user"]["email"] == "new@test.com"
        assert data["profile"]["full_name"] == "Nouvel Utilisateur"
        assert data["profile"]["role"] == "user"
        assert data["is_admin"] is False
        assert data["redirect_to"] == "/dashboard"
        assert "dashboard_session" in response.cookies

    def test_register_duplicate_email(self, client, registration_data):
        """Duplicate registration gets the friendlier message."""
        client.post("/api/auth/register", json=registration_data)
        response = client.post("/api/auth/register", json=registration_data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Un utilisateur avec cet email existe déjà."

    def test_register_weak_password(self, client, registration_data):
        registration_data["password"] = registration_data["confirm_password"] = "short"
        response = client.post("/api/auth/register", json=registration_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_register_password_mismatch(self, client, registration_data):
        registration_data["confirm_password"] = "Password124"
        response = client.post("/api/auth/register", json=registration_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Passwords do not match"

    def test_login_success(self, client, admin_account):
        response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["access_token"]
        assert data["is_admin"] is True
        assert data["redirect_to"] == "/admin"
        assert "dashboard_session" in response.cookies

    def test_login_reader_lands_on_dashboard(self, client, user_account):
        response = client.post("/api/auth/login", json={"email": USER_EMAIL, "password": PASSWORD})

        assert response.json()["redirect_to"] == "/dashboard"

    def test_login_invalid_credentials(self, client, admin_account):
        response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "Wrong12345"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid login credentials"
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"

    def test_login_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "nobody@test.com", "password": PASSWORD})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me(self, admin_client):
        response = admin_client.get("/api/auth/me")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"]["email"] == ADMIN_EMAIL
        assert data["profile"]["role"] == "admin"
        assert data["is_admin"] is True

    def test_me_with_bearer_token(self, client, admin_account):
        token = client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD}
        ).json()["access_token"]
        client.cookies.clear()

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK

    def test_me_unauthenticated(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error_code"] == "NOT_AUTHENTICATED"

    def test_logout_revokes_token(self, client, admin_account):
        token = client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD}
        ).json()["access_token"]

        response = client.post("/api/auth/logout")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["redirect_to"] == "/login"

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_without_session(self, client):
        response = client.post("/api/auth/logout")
        assert response.status_code == status.HTTP_200_OK

    def test_logout_discards_admin_workspace(self, admin_client):
        from app.panels.workspace import workspace_registry

        admin_client.get("/api/admin/kpis")
        assert len(workspace_registry) == 1

        admin_client.post("/api/auth/logout")
        assert len(workspace_registry) == 0

    def test_rate_limit_answers_through_slowapi(self):
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        from app.core import exceptions
        from main import app

        assert app.exception_handlers[RateLimitExceeded] is _rate_limit_exceeded_handler
        assert not hasattr(exceptions, "RateLimitExceededError")
