"""
==============================================================================
API Integration Tests
==============================================================================

Tests for REST API endpoints.

==============================================================================
"""

import pytest
from fastapi.testclient import TestClient

from orderpiqr.db.database import DatabaseManager
from orderpiqr.main import app


@pytest.fixture
def session_id(client: TestClient) -> str:
    """Create a scan session through the API."""
    response = client.post("/api/v1/sessions", json={"label": "handheld-1"})
    assert response.status_code == 200
    return response.json()["session"]["id"]


def scan(client: TestClient, session_id: str, code: str) -> dict:
    response = client.post(f"/api/v1/sessions/{session_id}/scans", json={"code": code})
    assert response.status_code == 200
    return response.json()


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        """Test health check returns status."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ["healthy", "degraded"]
        assert data["details"]["pick_list_length_threshold"] == 12

    def test_readiness_probe(self, client: TestClient):
        """Test readiness probe."""
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        """Test liveness probe."""
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestLifespan:
    """Tests for application startup and shutdown."""

    def test_shutdown_disposes_engine(self, monkeypatch: pytest.MonkeyPatch):
        """Test the connection pool is released on shutdown."""
        disposed = []
        monkeypatch.setattr(DatabaseManager, "dispose", lambda self: disposed.append(True))

        with TestClient(app):
            assert disposed == []

        assert disposed == [True]


class TestSessionEndpoints:
    """Tests for scan session management endpoints."""

    def test_create_session(self, client: TestClient):
        """Test creating a session."""
        response = client.post("/api/v1/sessions", json={"label": "  handheld-2  "})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["session"]["label"] == "handheld-2"
        assert data["session"]["status"] == "idle"
        assert data["session"]["has_pick_list"] is False
        assert data["session"]["instruction_lines"] == ["Scan eerst een pickbon."]
        assert data["session"]["progress_percent"] == 0

    def test_create_session_without_body(self, client: TestClient):
        """Test the body is optional."""
        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        assert response.json()["session"]["label"] is None

    def test_get_session(self, client: TestClient, session_id: str):
        """Test getting a session by id."""
        response = client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["session"]["id"] == session_id

    def test_get_session_not_found(self, client: TestClient):
        """Test error format for an unknown session."""
        response = client.get("/api/v1/sessions/nonexistent")
        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "SESSION_NOT_FOUND"
        assert data["error"]["details"]["session_id"] == "nonexistent"

    def test_list_sessions(self, client: TestClient, session_id: str):
        """Test listing and status filtering."""
        response = client.get("/api/v1/sessions")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["sessions"][0]["id"] == session_id

        response = client.get("/api/v1/sessions", params={"status": "completed"})
        assert response.json()["total"] == 0

    def test_delete_session(self, client: TestClient, session_id: str):
        """Test deleting a session."""
        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 200

        response = client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404


class TestScanEndpoints:
    """Tests for scan submission."""

    def test_scan_flow(self, client: TestClient, session_id: str, two_line_list: str):
        """Test loading a list and picking it to the end."""
        data = scan(client, session_id, two_line_list)
        assert data["outcome"] == "pick_list_loaded"
        assert data["session"]["instruction_lines"] == ["SKU1", "LOC1"]
        assert data["session"]["total_items"] == 2

        data = scan(client, session_id, "LOC1")
        assert data["outcome"] == "picked"
        assert data["session"]["progress_percent"] == 50.0
        assert data["session"]["instruction_text"] == "SKU2"

        data = scan(client, session_id, "WRONG")
        assert data["outcome"] == "mismatch"
        assert data["success"] is True
        assert data["session"]["mismatch_count"] == 1

        data = scan(client, session_id, "SKU2")
        assert data["outcome"] == "completed"
        assert data["session"]["status"] == "completed"
        assert data["session"]["is_complete"] is True
        assert data["session"]["progress_percent"] == 100.0
        assert data["session"]["instruction_lines"] == [
            "Einde van pickbon.",
            "Je bent klaar.",
            "Pak de volgende pickbon.",
        ]

        data = scan(client, session_id, "Je bent")
        assert data["outcome"] == "list_complete"

    def test_item_before_pick_list(self, client: TestClient, session_id: str):
        """Test an item scan without a list is an outcome, not an error."""
        data = scan(client, session_id, "SKU1")
        assert data["outcome"] == "no_pick_list"
        assert data["message"] == "Scan eerst een pickbon."

    def test_empty_code_rejected(self, client: TestClient, session_id: str):
        """Test validation of the scan body."""
        response = client.post(f"/api/v1/sessions/{session_id}/scans", json={"code": ""})
        assert response.status_code == 422

    def test_scan_unknown_session(self, client: TestClient):
        response = client.post("/api/v1/sessions/missing/scans", json={"code": "SKU1"})
        assert response.status_code == 404

    def test_undo_and_reset(self, client: TestClient, session_id: str, two_line_list: str):
        """Test undoing a pick and resetting the session."""
        response = client.post(f"/api/v1/sessions/{session_id}/undo")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NOTHING_TO_UNDO"

        scan(client, session_id, two_line_list)
        scan(client, session_id, "SKU1")

        response = client.post(f"/api/v1/sessions/{session_id}/undo")
        assert response.status_code == 200
        assert response.json()["session"]["last_picked_index"] == -1

        response = client.post(f"/api/v1/sessions/{session_id}/reset")
        assert response.status_code == 200
        assert response.json()["session"]["status"] == "idle"
        assert response.json()["session"]["has_pick_list"] is False


class TestCleanupEndpoints:
    """Tests for cleanup endpoints."""

    def test_cleanup_stats(self, client: TestClient, session_id: str):
        response = client.get("/api/v1/sessions/cleanup/stats")
        assert response.status_code == 200
        assert response.json()["stats"]["total_sessions"] == 1

    def test_cleanup_completed(self, client: TestClient, session_id: str, two_line_list: str):
        """Test only finished sessions are removed."""
        scan(client, session_id, two_line_list)
        scan(client, session_id, "SKU1")
        scan(client, session_id, "SKU2")
        client.post("/api/v1/sessions")

        response = client.delete("/api/v1/sessions/cleanup/completed")
        assert response.status_code == 200
        assert response.json()["deleted_count"] == 1
        assert client.get("/api/v1/sessions").json()["total"] == 1

    def test_cleanup_idle_keeps_recent(self, client: TestClient, session_id: str):
        response = client.delete("/api/v1/sessions/cleanup/idle", params={"hours": 1})
        assert response.status_code == 200
        assert response.json()["deleted_count"] == 0
