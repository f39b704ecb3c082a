"""
Tests for the task HTTP API against an app bound to a temporary database.
"""
import sqlite3
from unittest.mock import patch

import pytest

BASE = "/api/v1/tasks"


def _headers(user_id="u1"):
    return {"X-User-Id": user_id}


def _create(client, user_id="u1", title="X", description="Y"):
    return client.post(BASE, json={"title": title, "description": description}, headers=_headers(user_id))


class TestIdentity:
    """Requests without the trusted user header are rejected."""

    @pytest.mark.parametrize("method,path", [
        ("get", BASE),
        ("post", BASE),
        ("get", f"{BASE}/abc"),
        ("patch", f"{BASE}/abc"),
        ("delete", f"{BASE}/abc"),
    ])
    def test_missing_header_is_401(self, client, method, path):
        kwargs = {"json": {"title": "X", "description": "Y"}} if method in ("post", "patch") else {}
        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 401
        body = response.json()
        assert body["title"] == "Unauthorized"
        assert body["status"] == 401
        assert "X-User-Id" in body["detail"]
        assert response.headers["content-type"].startswith("application/problem+json")

    def test_blank_header_is_401(self, client):
        response = client.get(BASE, headers={"X-User-Id": "   "})
        assert response.status_code == 401

    def test_missing_header_checked_before_payload(self, client):
        response = client.post(BASE, json={})
        assert response.status_code == 401


class TestCreateTask:
    """Test POST /api/v1/tasks."""

    def test_create_returns_201_with_camel_case_body(self, client):
        response = _create(client, title="Write docs", description="All of them")

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Write docs"
        assert data["description"] == "All of them"
        assert data["status"] == "todo"
        assert data["userId"] == "u1"
        assert data["id"]
        assert "createdAt" in data and "updatedAt" in data
        assert "user_id" not in data

    def test_title_is_trimmed(self, client):
        response = _create(client, title="  A task  ")
        assert response.status_code == 201
        assert response.json()["title"] == "A task"

    def test_duplicate_scenario(self, client):
        assert _create(client, "u1").status_code == 201

        duplicate = _create(client, "u1")
        assert duplicate.status_code == 409
        assert duplicate.json()["title"] == "Conflict"
        assert duplicate.json()["type"] == "https://example.com/probs/conflict"

        assert _create(client, "u2").status_code == 201

    def test_duplicate_detected_after_trimming(self, client):
        assert _create(client, title="Trim me").status_code == 201
        assert _create(client, title="  Trim me ").status_code == 409

    def test_empty_description_allowed(self, client):
        assert _create(client, description="").status_code == 201

    def test_missing_title_is_validation_error(self, client):
        response = client.post(BASE, json={"description": "only"}, headers=_headers())

        assert response.status_code == 400
        body = response.json()
        assert body["title"] == "Validation Error"
        assert body["issues"][0]["loc"] == ["body", "title"]
        assert body["issues"][0]["message"] == "title is required"

    def test_missing_description_is_validation_error(self, client):
        response = client.post(BASE, json={"title": "only"}, headers=_headers())

        assert response.status_code == 400
        assert response.json()["issues"][0]["message"] == "description is required"

    @pytest.mark.parametrize("payload", [
        {"title": "", "description": "d"},
        {"title": "   ", "description": "d"},
        {"title": "x" * 256, "description": "d"},
        {"title": "t", "description": "x" * 5001},
        {"title": 5, "description": "d"},
    ])
    def test_field_constraints(self, client, payload):
        response = client.post(BASE, json=payload, headers=_headers())
        assert response.status_code == 400
        assert response.json()["issues"]

    def test_malformed_json_is_400(self, client):
        response = client.post(
            BASE,
            content=b"{not json",
            headers={**_headers(), "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_unknown_fields_ignored(self, client):
        response = client.post(
            BASE,
            json={"title": "T", "description": "D", "status": "done", "userId": "u2"},
            headers=_headers(),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "todo"
        assert response.json()["userId"] == "u1"


class TestReadTasks:
    """Test GET /api/v1/tasks and GET /api/v1/tasks/{id}."""

    def test_list_empty(self, client):
        response = client.get(BASE, headers=_headers())
        assert response.status_code == 200
        assert response.json() == []

    def test_list_is_scoped_and_newest_first(self, client):
        first = _create(client, title="first").json()
        second = _create(client, title="second").json()
        _create(client, "u2", title="foreign")

        response = client.get(BASE, headers=_headers())

        assert [t["id"] for t in response.json()] == [second["id"], first["id"]]

    def test_get_own_task(self, client):
        task = _create(client).json()
        response = client.get(f"{BASE}/{task['id']}", headers=_headers())
        assert response.status_code == 200
        assert response.json() == task

    def test_get_unknown_task_is_404(self, client):
        response = client.get(f"{BASE}/nope", headers=_headers())
        assert response.status_code == 404
        assert response.json()["detail"] == "Task not found"


class TestUpdateTask:
    """Test PATCH /api/v1/tasks/{id}."""

    def test_partial_update(self, client):
        task = _create(client).json()

        response = client.patch(
            f"{BASE}/{task['id']}", json={"description": "changed"}, headers=_headers()
        )

        assert response.status_code == 200
        assert response.json()["description"] == "changed"
        assert response.json()["title"] == task["title"]

    def test_lifecycle_scenario(self, client):
        task = _create(client).json()
        url = f"{BASE}/{task['id']}"

        archived = client.patch(url, json={"status": "archived"}, headers=_headers())
        assert archived.status_code == 200
        assert archived.json()["status"] == "archived"

        rejected = client.patch(url, json={"status": "in_progress"}, headers=_headers())
        assert rejected.status_code == 400
        body = rejected.json()
        assert body["title"] == "Bad Request"
        assert "'archived'" in body["detail"] and "'in_progress'" in body["detail"]

        assert client.get(url, headers=_headers()).json()["status"] == "archived"

    def test_unknown_status_is_validation_error(self, client):
        task = _create(client).json()
        response = client.patch(f"{BASE}/{task['id']}", json={"status": "blocked"}, headers=_headers())
        assert response.status_code == 400
        assert response.json()["title"] == "Validation Error"

    def test_empty_description_rejected_on_update(self, client):
        task = _create(client).json()
        response = client.patch(f"{BASE}/{task['id']}", json={"description": ""}, headers=_headers())
        assert response.status_code == 400
        assert response.json()["issues"][0]["message"] == "Description is required"

    def test_title_whitespace_stripped_on_update(self, client):
        task = _create(client).json()
        response = client.patch(f"{BASE}/{task['id']}", json={"title": "  padded  "}, headers=_headers())
        assert response.status_code == 200
        assert response.json()["title"] == "padded"

    def test_update_colliding_with_sibling_is_409(self, client):
        _create(client, title="A", description="same")
        second = _create(client, title="B", description="same").json()

        response = client.patch(f"{BASE}/{second['id']}", json={"title": "A"}, headers=_headers())

        assert response.status_code == 409
        assert response.json()["title"] == "Conflict"

    @pytest.mark.parametrize("field", ["title", "description", "status"])
    def test_explicit_null_is_validation_error(self, client, field):
        task = _create(client).json()
        url = f"{BASE}/{task['id']}"

        response = client.patch(url, json={field: None}, headers=_headers())

        assert response.status_code == 400
        issues = response.json()["issues"]
        assert [issue["loc"] for issue in issues] == [["body", field]]
        assert client.get(url, headers=_headers()).json() == task

    def test_update_unknown_task_is_404(self, client):
        response = client.patch(f"{BASE}/nope", json={"title": "x"}, headers=_headers())
        assert response.status_code == 404


class TestDeleteTask:
    """Test DELETE /api/v1/tasks/{id}."""

    def test_delete_then_get_and_delete_again(self, client):
        task = _create(client).json()
        url = f"{BASE}/{task['id']}"

        response = client.delete(url, headers=_headers())
        assert response.status_code == 204
        assert response.content == b""

        assert client.get(url, headers=_headers()).status_code == 404
        assert client.delete(url, headers=_headers()).status_code == 404


class TestTenantIsolation:
    """Another user's task looks exactly like a missing one."""

    def test_foreign_user_sees_404_everywhere(self, client):
        task = _create(client, "u1").json()
        url = f"{BASE}/{task['id']}"

        get_resp = client.get(url, headers=_headers("u2"))
        patch_resp = client.patch(url, json={"status": "done"}, headers=_headers("u2"))
        delete_resp = client.delete(url, headers=_headers("u2"))

        for response in (get_resp, patch_resp, delete_resp):
            assert response.status_code == 404
            assert response.json()["detail"] == "Task not found"

        owner_view = client.get(url, headers=_headers("u1")).json()
        assert owner_view["status"] == "todo"

    def test_foreign_list_excludes_task(self, client):
        _create(client, "u1")
        assert client.get(BASE, headers=_headers("u2")).json() == []


class TestStorageFaults:
    """Unexpected storage errors become generic 500 problems."""

    def test_storage_fault_is_500(self, client):
        with patch(
            "tasktrack.storage.task_repository.TaskRepository.list_by_user",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            response = client.get(BASE, headers=_headers())

        assert response.status_code == 500
        body = response.json()
        assert body["title"] == "Internal Server Error"
        assert "locked" not in body["detail"]


class TestRequestId:
    """Request IDs are echoed back for tracing."""

    def test_incoming_request_id_is_echoed(self, client):
        response = client.get(BASE, headers={**_headers(), "X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_generated_when_absent(self, client):
        response = client.get(BASE, headers=_headers())
        assert response.headers["X-Request-ID"]

    def test_error_body_carries_request_id(self, client):
        response = client.get(f"{BASE}/nope", headers={**_headers(), "X-Request-ID": "req-9"})
        assert response.json()["request_id"] == "req-9"
