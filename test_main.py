# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for Project Portfolio Service
HTTP contract: status codes, payload shapes, rule violations surfaced as 400.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from main import app
from portfolio.core.config import settings
from portfolio.core.logging import JSONFormatter, RequestIDFilter, request_id_var
from portfolio.middleware import endpoint_label

client = TestClient(app)

BASE = "/api/v1"
PATH_TO_COMPLETED = [
    "review_completed", "review_approved", "started", "planned", "in_progress", "completed",
]


# ============================================
# Helpers
# ============================================
def create_member(name, role):
    response = client.post(f"{BASE}/members", json={"name": name, "role": role})
    assert response.status_code == 201, response.text
    return response.json()


def project_payload(manager_id, staff_ids, **overrides):
    payload = {
        "name": "Apollo",
        "start_date": "2024-01-01",
        "expected_end_date": "2024-03-01",
        "total_budget": "50000",
        "description": "Moonshot",
        "manager_id": manager_id,
        "staff_ids": staff_ids,
    }
    payload.update(overrides)
    return payload


def set_status(project_id, status):
    return client.patch(f"{BASE}/projects/{project_id}/status", json={"status": status})


@pytest.fixture
def team():
    manager = create_member("Maria", "manager")
    staff = [create_member(f"Staff {i}", "staff") for i in range(3)]
    return manager, staff


@pytest.fixture
def project(team):
    manager, staff = team
    response = client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[0]["id"]]))
    assert response.status_code == 201, response.text
    return response.json()


# ============================================
# Health & Metrics
# ============================================
class TestHealth:
    def test_health(self):
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION

    def test_readiness(self):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_readiness_db_down_is_503(self):
        repo = MagicMock()
        repo.verify_connection.side_effect = RuntimeError("connection refused")
        with patch("portfolio.controllers.system_controller.get_project_repo", return_value=repo):
            response = client.get("/health/ready")
        assert response.status_code == 503
        assert "connection refused" in response.json()["detail"]

    def test_request_id_generated(self):
        assert client.get("/health").headers.get("X-Request-ID")

    def test_request_id_propagated(self):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    def test_metrics_exposed(self, project):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "projects_created_total" in response.text
        assert "http_requests_total" in response.text


# ============================================
# Request IDs, logging, error envelope
# ============================================
class TestObservability:
    def test_request_id_reaches_service_logs(self):
        seen = []
        fake_logger = MagicMock()
        fake_logger.info.side_effect = lambda *args, **kwargs: seen.append(request_id_var.get())
        with patch("portfolio.services.member_service.logger", fake_logger):
            client.post(f"{BASE}/members", json={"name": "Ana", "role": "staff"},
                        headers={"X-Request-ID": "req-42"})
        assert seen == ["req-42"]
        assert request_id_var.get() is None

    def test_json_line_carries_request_id(self):
        record = logging.LogRecord("portfolio.test", logging.INFO, __file__, 1, "hello", None, None)
        token = request_id_var.set("req-7")
        try:
            RequestIDFilter().filter(record)
        finally:
            request_id_var.reset(token)
        line = json.loads(JSONFormatter().format(record))
        assert line["request_id"] == "req-7"
        assert line["message"] == "hello"

    def test_json_line_without_request(self):
        record = logging.LogRecord("portfolio.test", logging.INFO, __file__, 1, "boot", None, None)
        RequestIDFilter().filter(record)
        assert "request_id" not in json.loads(JSONFormatter().format(record))

    @pytest.mark.parametrize("path,label", [
        ("/api/v1/projects", "/api/v1/projects"),
        ("/api/v1/projects/42", "/api/v1/projects/{id}"),
        ("/api/v1/projects/42/status", "/api/v1/projects/{id}/status"),
        ("/api/v1/members/7", "/api/v1/members/{id}"),
        ("/api/v1/projects/report", "/api/v1/projects/report"),
    ])
    def test_endpoint_label(self, path, label):
        assert endpoint_label(path) == label

    def test_unhandled_error_envelope(self):
        lenient = TestClient(app, raise_server_exceptions=False)
        with patch("portfolio.services.project_service.ProjectService.get_project",
                   side_effect=RuntimeError("boom")):
            response = lenient.get(f"{BASE}/projects/1", headers={"X-Request-ID": "req-500"})
        assert response.status_code == 500
        assert response.json() == {
            "error": "internal_server_error", "detail": "boom", "request_id": "req-500",
        }

    def test_error_model_in_openapi(self):
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        assert "ErrorResponse" in schemas


# ============================================
# Members
# ============================================
class TestMembers:
    def test_create_member(self):
        data = create_member("Ana", "Staff")
        assert data["role"] == "staff"
        assert data["id"] > 0
        assert data["created_at"]

    def test_invalid_role_is_400(self):
        response = client.post(f"{BASE}/members", json={"name": "Ana", "role": "admin"})
        assert response.status_code == 400
        assert "Invalid role" in response.json()["detail"]

    def test_duplicate_is_400(self):
        create_member("Ana", "staff")
        response = client.post(f"{BASE}/members", json={"name": "Ana", "role": "staff"})
        assert response.status_code == 400

    def test_blank_name_is_422(self):
        response = client.post(f"{BASE}/members", json={"name": "   ", "role": "staff"})
        assert response.status_code == 422

    def test_get_member(self):
        created = create_member("Ana", "manager")
        response = client.get(f"{BASE}/members/{created['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Ana"

    def test_get_missing_member_is_404(self):
        assert client.get(f"{BASE}/members/999").status_code == 404

    def test_list_by_role(self, team):
        response = client.get(f"{BASE}/members", params={"role": "manager"})
        assert [m["name"] for m in response.json()] == ["Maria"]
        assert len(client.get(f"{BASE}/members").json()) == 4

    def test_list_unknown_role_is_400(self):
        assert client.get(f"{BASE}/members", params={"role": "boss"}).status_code == 400


# ============================================
# Project creation
# ============================================
class TestCreateProject:
    def test_created_under_review_low_risk(self, project, team):
        manager, staff = team
        assert project["status"] == "under_review"
        assert project["risk_classification"] == "low"
        assert project["risk_label"] == "Low risk"
        assert project["manager_id"] == manager["id"]
        assert project["manager_name"] == "Maria"
        assert project["staff_ids"] == [staff[0]["id"]]
        assert Decimal(str(project["total_budget"])) == Decimal("50000")
        assert project["actual_end_date"] is None

    def test_high_risk_budget(self, team):
        manager, staff = team
        response = client.post(f"{BASE}/projects", json=project_payload(
            manager["id"], [staff[0]["id"]], total_budget="500000.01",
        ))
        assert response.json()["risk_classification"] == "high"

    def test_empty_staff_is_400(self, team):
        manager, _ = team
        response = client.post(f"{BASE}/projects", json=project_payload(manager["id"], []))
        assert response.status_code == 400
        assert "at least" in response.json()["detail"].lower()

    def test_staff_as_manager_is_400(self, team):
        _, staff = team
        response = client.post(f"{BASE}/projects", json=project_payload(staff[0]["id"], [staff[1]["id"]]))
        assert response.status_code == 400

    def test_end_before_start_is_400(self, team):
        manager, staff = team
        response = client.post(f"{BASE}/projects", json=project_payload(
            manager["id"], [staff[0]["id"]], expected_end_date="2023-12-31",
        ))
        assert response.status_code == 400

    def test_unknown_manager_is_404(self, team):
        _, staff = team
        response = client.post(f"{BASE}/projects", json=project_payload(999, [staff[0]["id"]]))
        assert response.status_code == 404

    def test_capacity_is_400(self, team):
        manager, staff = team
        for i in range(3):
            client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[0]["id"]], name=f"P{i}"))
        response = client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[0]["id"]]))
        assert response.status_code == 400
        assert "3 active projects" in response.json()["detail"]

    def test_negative_budget_is_422(self, team):
        manager, staff = team
        response = client.post(f"{BASE}/projects", json=project_payload(
            manager["id"], [staff[0]["id"]], total_budget="-1",
        ))
        assert response.status_code == 422

    def test_missing_fields_is_422(self):
        assert client.post(f"{BASE}/projects", json={"name": "X"}).status_code == 422


# ============================================
# Project queries
# ============================================
class TestQueryProjects:
    def test_get_project(self, project):
        response = client.get(f"{BASE}/projects/{project['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Apollo"

    def test_get_missing_is_404(self):
        assert client.get(f"{BASE}/projects/999").status_code == 404

    def test_list_with_filters(self, team):
        manager, staff = team
        client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[0]["id"]], name="Alpha"))
        client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[1]["id"]], name="Beta"))

        data = client.get(f"{BASE}/projects").json()
        assert data["total"] == 2
        assert data["page"] == 1

        data = client.get(f"{BASE}/projects", params={"name": "alp"}).json()
        assert [p["name"] for p in data["projects"]] == ["Alpha"]

        data = client.get(f"{BASE}/projects", params={"member_id": staff[1]["id"]}).json()
        assert [p["name"] for p in data["projects"]] == ["Beta"]

        data = client.get(f"{BASE}/projects", params={"status": "Under_Review"}).json()
        assert data["total"] == 2

    def test_pagination(self, team):
        manager, staff = team
        for i in range(3):
            client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[1]["id"]], name=f"P{i}"))
        data = client.get(f"{BASE}/projects", params={"page": 2, "per_page": 2}).json()
        assert data["total"] == 3
        assert len(data["projects"]) == 1

    def test_unknown_status_filter_is_400(self):
        assert client.get(f"{BASE}/projects", params={"status": "paused"}).status_code == 400

    def test_name_filter_wildcards_are_literal(self, team):
        manager, staff = team
        for i, name in enumerate(("Apollo", "Gemini", "100% done")):
            client.post(f"{BASE}/projects", json=project_payload(manager["id"], [staff[i]["id"]], name=name))
        data = client.get(f"{BASE}/projects", params={"name": "%"}).json()
        assert [p["name"] for p in data["projects"]] == ["100% done"]

    def test_risk_endpoint(self, project):
        data = client.get(f"{BASE}/projects/{project['id']}/risk").json()
        assert data == {"project_id": project["id"], "risk_classification": "low", "label": "Low risk"}

    def test_risk_missing_is_404(self):
        assert client.get(f"{BASE}/projects/999/risk").status_code == 404


# ============================================
# Status transitions
# ============================================
class TestStatusTransitions:
    def test_successor_allowed(self, project):
        response = set_status(project["id"], "review_completed")
        assert response.status_code == 200
        assert response.json()["status"] == "review_completed"

    def test_skip_ahead_is_400(self, project):
        response = set_status(project["id"], "in_progress")
        assert response.status_code == 400
        assert "Cannot transition" in response.json()["detail"]
        assert client.get(f"{BASE}/projects/{project['id']}").json()["status"] == "under_review"

    def test_unknown_status_is_422(self, project):
        assert set_status(project["id"], "paused").status_code == 422

    def test_missing_project_is_404(self):
        assert set_status(999, "cancelled").status_code == 404

    def test_full_lifecycle_sets_actual_end_date(self, project):
        for status in PATH_TO_COMPLETED:
            response = set_status(project["id"], status)
            assert response.status_code == 200, response.text
        assert response.json()["actual_end_date"] == date.today().isoformat()

    def test_cancel_then_terminal(self, project):
        assert set_status(project["id"], "cancelled").status_code == 200
        assert set_status(project["id"], "review_completed").status_code == 400


# ============================================
# Full update
# ============================================
class TestUpdateProject:
    def test_update_recomputes_risk(self, project, team):
        manager, staff = team
        response = client.put(f"{BASE}/projects/{project['id']}", json=project_payload(
            manager["id"], [staff[1]["id"], staff[2]["id"]], total_budget="600000",
        ))
        assert response.status_code == 200
        data = response.json()
        assert data["risk_classification"] == "high"
        assert data["staff_ids"] == sorted([staff[1]["id"], staff[2]["id"]])

    def test_frozen_status_change_is_400(self, project, team):
        manager, staff = team
        for status in PATH_TO_COMPLETED[:3]:
            set_status(project["id"], status)
        response = client.put(f"{BASE}/projects/{project['id']}", json=project_payload(
            manager["id"], [staff[0]["id"]], status="planned",
        ))
        assert response.status_code == 400

    def test_update_missing_is_404(self, team):
        manager, staff = team
        response = client.put(f"{BASE}/projects/999", json=project_payload(manager["id"], [staff[0]["id"]]))
        assert response.status_code == 404


# ============================================
# Delete
# ============================================
class TestDeleteProject:
    def test_delete_under_review(self, project):
        assert client.delete(f"{BASE}/projects/{project['id']}").status_code == 204
        assert client.get(f"{BASE}/projects/{project['id']}").status_code == 404

    def test_delete_started_is_400(self, project):
        for status in PATH_TO_COMPLETED[:3]:
            set_status(project["id"], status)
        assert client.delete(f"{BASE}/projects/{project['id']}").status_code == 400

    def test_delete_missing_is_404(self):
        assert client.delete(f"{BASE}/projects/999").status_code == 404


# ============================================
# Portfolio report
# ============================================
class TestReport:
    def test_report_shape(self, project, team):
        manager, staff = team
        client.post(f"{BASE}/projects", json=project_payload(
            manager["id"], [staff[1]["id"]], total_budget="1500.50",
        ))
        data = client.get(f"{BASE}/projects/report").json()
        assert data["projects_by_status"]["under_review"] == 2
        assert data["projects_by_status"]["completed"] == 0
        assert Decimal(str(data["budget_by_status"]["under_review"])) == Decimal("51500.50")
        assert data["average_duration_days"] == 0.0
        assert data["unique_staff_count"] == 2
        assert data["total_projects"] == 2

    def test_empty_report(self):
        data = client.get(f"{BASE}/projects/report").json()
        assert data["total_projects"] == 0
        assert set(data["projects_by_status"]) == {
            "under_review", "review_completed", "review_approved", "started",
            "planned", "in_progress", "completed", "cancelled",
        }
