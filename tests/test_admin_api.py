"""Tests for the admin panel API and the website statistics API."""

import uuid

from fastapi import status


class TestAdminAccess:

    def test_anonymous_gets_401(self, client):
        response = client.get("/api/admin/kpis")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_reader_gets_403(self, user_client):
        response = user_client.get("/api/admin/kpis")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "FORBIDDEN"


class TestKPIEndpoints:

    def test_list(self, admin_client, sample_kpi):
        response = admin_client.get("/api/admin/kpis")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["rows"][0]["display_value"] == "42 %"
        assert data["form_open"] is False

    def test_create(self, admin_client):
        response = admin_client.post(
            "/api/admin/kpis", json={"key": "visits", "label": "Visites", "value": "120"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["total"] == 1
        assert data["rows"][0]["value"] == 120
        assert data["notifications"][-1]["title"] == "Succès"

    def test_create_missing_label(self, admin_client):
        response = admin_client.post("/api/admin/kpis", json={"key": "visits", "label": ""})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_create_duplicate_key_passes_remote_message(self, admin_client, sample_kpi):
        response = admin_client.post("/api/admin/kpis", json={"key": "budget_execution", "label": "Dup"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "REMOTE_ERROR"

    def test_update_keeps_key(self, admin_client, sample_kpi):
        response = admin_client.put(
            f"/api/admin/kpis/{sample_kpi.id}",
            json={"key": "other", "label": "Budget", "value": 50, "unit": "%"},
        )

        assert response.status_code == status.HTTP_200_OK
        row = response.json()["rows"][0]
        assert row["key"] == "budget_execution"
        assert row["display_value"] == "50 %"

    def test_delete(self, admin_client, sample_kpi):
        response = admin_client.delete(f"/api/admin/kpis/{sample_kpi.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 0

    def test_form_open_and_close(self, admin_client, sample_kpi):
        admin_client.get("/api/admin/kpis")

        response = admin_client.post(f"/api/admin/kpis/form/open?row_id={sample_kpi.id}")
        assert response.json()["form_open"] is True
        assert response.json()["form"]["key"] == "budget_execution"

        response = admin_client.post("/api/admin/kpis/form/close")
        assert response.json()["form_open"] is False

    def test_form_open_unknown_panel(self, admin_client):
        response = admin_client.post("/api/admin/reports/form/open")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUserEndpoints:

    def test_list_newest_first(self, admin_client, admin_account, user_account):
        response = admin_client.get("/api/admin/users")

        data = response.json()
        assert [row["email"] for row in data["rows"]] == ["reader@test.com", "admin@test.com"]
        assert data["rows"][0]["role_label"] == "Lecteur"

    def test_create_user(self, admin_client):
        response = admin_client.post(
            "/api/admin/users",
            json={"full_name": "Marie", "email": "marie@test.com", "password": "Password123", "role": "user"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["total"] == 2
        assert response.json()["form"]["password"] == ""

    def test_create_user_duplicate(self, admin_client, user_account):
        response = admin_client.post(
            "/api/admin/users",
            json={"email": "reader@test.com", "password": "Password123"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "User already registered"

    def test_update_role(self, admin_client, user_account):
        response = admin_client.put(
            f"/api/admin/users/{user_account.id}", json={"full_name": "Lecteur", "role": "admin"}
        )

        assert response.status_code == status.HTTP_200_OK
        row = next(r for r in response.json()["rows"] if r["id"] == str(user_account.id))
        assert row["role"] == "admin"

    def test_cannot_delete_self(self, admin_client, admin_account):
        response = admin_client.delete(f"/api/admin/users/{admin_account.id}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Vous ne pouvez pas supprimer votre propre compte"

    def test_bulk_delete_reports_failures(self, admin_client, admin_account, user_account):
        missing = uuid.uuid4()
        response = admin_client.post(
            "/api/admin/users/bulk-delete", json={"ids": [str(user_account.id), str(missing)]}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["requested"] == 2
        assert data["failed_count"] == 1
        assert data["failed_ids"] == [str(missing)]
        assert data["message"] == "1 utilisateurs n'ont pas pu être supprimés."
        assert [row["email"] for row in data["panel"]["rows"]] == ["admin@test.com"]

    def test_bulk_delete_selection(self, admin_client, admin_account, user_account):
        admin_client.get("/api/admin/users")
        response = admin_client.post(f"/api/admin/users/{user_account.id}/select")
        assert response.json()["selected_ids"] == [str(user_account.id)]

        response = admin_client.post("/api/admin/users/bulk-delete", json={})

        data = response.json()
        assert data["failed_count"] == 0
        assert data["panel"]["total"] == 1
        assert data["panel"]["selected_ids"] == []

    def test_select_all_toggles(self, admin_client, admin_account, user_account):
        admin_client.get("/api/admin/users")

        response = admin_client.post("/api/admin/users/select-all")
        assert len(response.json()["selected_ids"]) == 2

        response = admin_client.post("/api/admin/users/select-all")
        assert response.json()["selected_ids"] == []


class TestTaskEndpoints:

    def test_list_with_components(self, admin_client, sample_task, components):
        response = admin_client.get("/api/admin/tasks")

        data = response.json()
        assert data["rows"][0]["component_name"] == "Composante 1"
        assert len(data["components"]) == 2

    def test_components(self, admin_client, components):
        response = admin_client.get("/api/admin/tasks/components")

        assert response.status_code == status.HTTP_200_OK
        assert [c["name"] for c in response.json()] == ["Composante 1", "Composante 2"]

    def test_create_audit_task(self, admin_client):
        response = admin_client.post(
            "/api/admin/tasks",
            json={"activity_name": "Audit", "status": "Non démarré", "budget_allocated": "", "start_date": ""},
        )

        assert response.status_code == status.HTTP_201_CREATED
        row = response.json()["rows"][0]
        assert row["progress"] == 0
        assert row["tdr_done"] is False
        assert row["budget_allocated"] is None
        assert row["component_name"] == "N/A"

    def test_update_task(self, admin_client, sample_task):
        response = admin_client.put(
            f"/api/admin/tasks/{sample_task.id}",
            json={"activity_name": "Atelier", "status": "Terminé", "progress": 100, "tdr_done": True},
        )

        row = response.json()["rows"][0]
        assert row["status"] == "Terminé"
        assert row["progress"] == 100
        assert row["component_id"] is None

    def test_delete_task(self, admin_client, sample_task):
        response = admin_client.delete(f"/api/admin/tasks/{sample_task.id}")

        assert response.json()["total"] == 0


class TestStatsEndpoints:

    def test_crud(self, admin_client):
        response = admin_client.post(
            "/api/admin/stats",
            json={"metric_name": "Revenus", "metric_value": 1000, "metric_type": "financial"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        stat = response.json()["rows"][0]
        assert stat["display_value"] == "1\u202f000,00\u00a0$US"

        response = admin_client.put(
            f"/api/admin/stats/{stat['id']}",
            json={"metric_name": "Revenus", "metric_value": 2000, "metric_type": "financial", "description": ""},
        )
        assert response.json()["rows"][0]["metric_value"] == 2000
        assert response.json()["rows"][0]["description"] is None

        response = admin_client.delete(f"/api/admin/stats/{stat['id']}")
        assert response.json()["total"] == 0

    def test_invalid_metric_type(self, admin_client):
        response = admin_client.post(
            "/api/admin/stats", json={"metric_name": "X", "metric_value": 1, "metric_type": "weird"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "REMOTE_ERROR"


class TestWebsiteStatsEndpoints:

    def test_list_for_any_user(self, user_client, sample_stats):
        response = user_client.get("/api/website-stats")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 3

    def test_filter_by_type(self, user_client, sample_stats):
        response = user_client.get("/api/website-stats", params={"type": "financial"})

        assert [s["metric_name"] for s in response.json()["stats"]] == ["Budget"]

    def test_value_by_name(self, user_client, sample_stats):
        assert user_client.get("/api/website-stats/Projets").json()["metric_value"] == 37
        assert user_client.get("/api/website-stats/Inconnu").json()["metric_value"] == 0

    def test_requires_session(self, client):
        assert client.get("/api/website-stats").status_code == status.HTTP_401_UNAUTHORIZED
