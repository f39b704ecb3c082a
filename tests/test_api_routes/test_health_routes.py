"""
Tests for the operational endpoints (root, liveness, readiness, health, metrics).
"""
import sqlite3
from unittest.mock import patch


class TestProbes:
    """Probe endpoints need no user identity."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": "API is running!"}

    def test_liveness(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_readiness_when_database_answers(self, client):
        response = client.get("/readyz")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_readiness_when_database_fails(self, client, temp_db):
        with patch.object(temp_db, "ping", side_effect=sqlite3.OperationalError("unable to open database")):
            response = client.get("/readyz")
        assert response.status_code == 503
        assert response.json() == {"status": "not ready"}


class TestHealthCheck:
    """Test GET /health."""

    def test_health_check_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["database"]["type"] == "sqlite"

    def test_health_check_unhealthy(self, client, temp_db):
        with patch.object(temp_db, "ping", side_effect=sqlite3.OperationalError("gone")):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["components"]["database"]["error_type"] == "OperationalError"


class TestMetrics:
    """Test GET /metrics."""

    def test_metrics_use_route_templates(self, client):
        task = client.post(
            "/api/v1/tasks", json={"title": "m", "description": "d"}, headers={"X-User-Id": "u1"}
        ).json()
        client.get(f"/api/v1/tasks/{task['id']}", headers={"X-User-Id": "u1"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert "http_requests_total" in body
        assert 'endpoint="/api/v1/tasks/{task_id}"' in body
        assert task["id"] not in body


class TestUnknownRoutes:
    """Framework errors are rendered as problem details too."""

    def test_unknown_route_is_problem_404(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"
        assert response.json()["instance"] == "/nowhere"

    def test_wrong_method_is_405(self, client):
        response = client.put("/api/v1/tasks/abc", json={}, headers={"X-User-Id": "u1"})
        assert response.status_code == 405
        assert "allow" in response.headers
