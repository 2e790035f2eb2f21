"""Integration tests for the HTTP surface with a real SQLite store."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.core.config import settings
from src.interface.push_sender import SendNotificationResult
from src.main import app


@pytest.fixture
def mock_send(monkeypatch):
    mock = AsyncMock(return_value=SendNotificationResult(success=True, notification_id="notif_1"))
    monkeypatch.setattr("src.services.notification_service.push_sender.send_push_notification", mock)
    return mock


@pytest.fixture
def api_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "geonudge.db"))
    monkeypatch.setattr(settings, "location_min_interval_ms", 0)
    monkeypatch.setattr(settings, "location_min_distance_m", 0.0)


@pytest.fixture
def client(api_settings, mock_send) -> Generator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def create_located_task(client: TestClient, name: str = "Pick up parcel") -> dict:
    task = client.post("/tasks", json={"name": name}).json()
    response = client.put(
        f"/tasks/{task['id']}/location",
        json={"latitude": 37.0, "longitude": -122.03, "address": "42 Market St"},
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
class TestHealth:
    def test_health_reports_geofencing(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "geofencing_available": True}

    def test_health_without_permission(self, api_settings, mock_send, monkeypatch):
        monkeypatch.setattr(settings, "location_permission_granted", False)

        with TestClient(app) as denied:
            assert denied.get("/health").json()["geofencing_available"] is False


@pytest.mark.integration
class TestTasks:
    def test_create_and_list(self, client):
        response = client.post("/tasks", json={"name": "Buy milk"})

        assert response.status_code == 201
        task = response.json()
        assert task["name"] == "Buy milk"
        assert task["completed"] is False
        assert task["location"] is None
        assert task["notified"] is False
        assert [t["id"] for t in client.get("/tasks").json()] == [task["id"]]

    def test_blank_name_rejected(self, client):
        response = client.post("/tasks", json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "ERR_INVALID_ARGUMENT"

    def test_get_task_includes_label(self, client):
        task = create_located_task(client)

        body = client.get(f"/tasks/{task['id']}").json()

        assert body["address"] == "42 Market St"
        assert body["location_label"] == "42 Market St"

    def test_unknown_task(self, client):
        missing = client.get("/tasks/missing")
        assert missing.status_code == 404
        assert missing.json()["detail"]["code"] == "ERR_TASK_NOT_FOUND"
        assert "missing" in missing.json()["detail"]["message"]

        response = client.post("/tasks/missing/toggle")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ERR_TASK_NOT_FOUND"

    def test_toggle_and_filter(self, client):
        open_task = client.post("/tasks", json={"name": "Open"}).json()
        done = client.post("/tasks", json={"name": "Done"}).json()

        toggled = client.post(f"/tasks/{done['id']}/toggle").json()

        assert toggled["completed"] is True
        assert [t["id"] for t in client.get("/tasks", params={"completed": False}).json()] == [open_task["id"]]
        assert [t["id"] for t in client.get("/tasks", params={"completed": True}).json()] == [done["id"]]

    def test_description(self, client):
        task = client.post("/tasks", json={"name": "Groceries"}).json()

        response = client.put(f"/tasks/{task['id']}/description", json={"description": "eggs"})

        assert response.json()["description"] == "eggs"

    def test_delete(self, client):
        task = client.post("/tasks", json={"name": "Groceries"}).json()

        assert client.delete(f"/tasks/{task['id']}").status_code == 200
        assert client.get("/tasks").json() == []
        assert client.delete(f"/tasks/{task['id']}").status_code == 404

    def test_clear_completed(self, client):
        client.post("/tasks", json={"name": "Keep"})
        done = client.post("/tasks", json={"name": "Done"}).json()
        client.post(f"/tasks/{done['id']}/toggle")

        response = client.post("/tasks/clear-completed")

        assert response.json() == {"removed": [done["id"]]}
        assert [t["name"] for t in client.get("/tasks").json()] == ["Keep"]

    def test_invalid_coordinate(self, client):
        task = client.post("/tasks", json={"name": "Nowhere"}).json()

        response = client.put(f"/tasks/{task['id']}/location", json={"latitude": 91, "longitude": 0})

        assert response.status_code == 400

    def test_clear_location(self, client):
        task = create_located_task(client)

        cleared = client.delete(f"/tasks/{task['id']}/location").json()

        assert cleared["location"] is None
        assert cleared["address"] is None

    def test_current_location_without_permission(self, api_settings, mock_send, monkeypatch):
        monkeypatch.setattr(settings, "location_permission_granted", False)

        with TestClient(app) as denied:
            task = denied.post("/tasks", json={"name": "Here"}).json()
            response = denied.post(f"/tasks/{task['id']}/location/current")

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ERR_PERMISSION_DENIED"

    def test_tasks_survive_restart(self, api_settings, mock_send):
        with TestClient(app) as first:
            task = create_located_task(first)

        with TestClient(app) as second:
            assert [t["id"] for t in second.get("/tasks").json()] == [task["id"]]


@pytest.mark.integration
class TestPositions:
    def test_scenario_notifies_once(self, client, mock_send):
        task = create_located_task(client)

        far = client.post("/positions", json={"latitude": 37.0, "longitude": -122.0}).json()
        assert far == {"accepted": True, "geofencing_available": True}
        assert mock_send.await_count == 0

        client.post("/positions", json={"latitude": 37.0, "longitude": -122.014})
        client.post("/positions", json={"latitude": 37.0, "longitude": -122.015})
        client.portal.call(app.state.engine.wait_idle)

        assert mock_send.await_count == 1
        assert mock_send.await_args.kwargs["data"] == {"taskId": task["id"]}
        assert client.get(f"/tasks/{task['id']}").json()["notified"] is True

    def test_invalid_fix_rejected(self, client):
        response = client.post("/positions", json={"latitude": 0, "longitude": 181})

        assert response.status_code == 400

    def test_denied_feed_ignores_fixes(self, api_settings, mock_send, monkeypatch):
        monkeypatch.setattr(settings, "location_permission_granted", False)

        with TestClient(app) as denied:
            create_located_task(denied)
            response = denied.post("/positions", json={"latitude": 37.0, "longitude": -122.014})

        assert response.json() == {"accepted": False, "geofencing_available": False}
        assert mock_send.await_count == 0


@pytest.mark.integration
class TestFavorites:
    def test_add_list_remove(self, client):
        response = client.post(
            "/favorites", json={"name": "Home", "latitude": 37.0, "longitude": -122.0, "address": "1 Home Rd"}
        )

        assert response.status_code == 201
        assert [f["name"] for f in client.get("/favorites").json()] == ["Home"]

        assert client.delete("/favorites/0").json()["name"] == "Home"
        assert client.get("/favorites").json() == []

    def test_remove_out_of_range(self, client):
        response = client.delete("/favorites/3")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ERR_OUT_OF_RANGE"

    def test_blank_name_rejected(self, client):
        response = client.post("/favorites", json={"name": " ", "latitude": 1, "longitude": 1})

        assert response.status_code == 400

    def test_assign_favorite_to_task(self, client):
        client.post("/favorites", json={"name": "Gym", "latitude": 37.0, "longitude": -122.0, "address": "1 Fit St"})
        task = client.post("/tasks", json={"name": "Yoga"}).json()

        assigned = client.post(f"/tasks/{task['id']}/location/favorite/0").json()

        assert assigned["location"] == {"latitude": 37.0, "longitude": -122.0}
        assert client.get(f"/tasks/{task['id']}").json()["location_label"] == "Gym"
