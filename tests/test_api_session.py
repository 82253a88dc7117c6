"""
API tests: session routes, error mapping and the websocket stream.

The controller runs against FakeClock/RecordingAudio so no worker thread
or audio device is needed.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from stillpoint.api.dependencies import set_service_container
from stillpoint.api.main import create_app
from stillpoint.api.websocket import websocket_session_endpoint
from stillpoint.controllers.session_controller import SessionController
from stillpoint.managers.config_manager import ConfigManager
from stillpoint.models.events import EventType
from stillpoint.services.service_container import ServiceContainer

from conftest import settle


@pytest.fixture
def services(event_bus, controller):
    config_manager = ConfigManager()
    config_manager.load()
    services = ServiceContainer(
        event_bus=event_bus,
        session_controller=controller,
        config_manager=config_manager,
    )
    set_service_container(services)
    yield services
    set_service_container(None)


@pytest.fixture
def client(services):
    with TestClient(create_app()) as client:
        yield client


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["timer_available"] is True


def test_service_container_missing_returns_503():
    set_service_container(None)
    with TestClient(create_app()) as client:
        response = client.get("/api/v1/session")

    assert response.status_code == 503


def test_status_idle(client):
    response = client.get("/api/v1/session")

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "IDLE"
    assert body["remaining_ms"] is None
    assert body["awaiting_dismissal"] is False


def test_presets(client):
    body = client.get("/api/v1/session/presets").json()

    assert body["preset_minutes"] == [5, 10, 15, 20]
    assert body["default_minutes"] == 10
    assert body["scenes"] == ["rain", "forest", "ocean"]


def test_start_uses_request_values(client, fake_clock, calls):
    response = client.post("/api/v1/session/start", json={"minutes": 15, "scene": "ocean"})

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "ACTIVE"
    assert body["total_duration_ms"] == 900_000
    assert body["scene"] == "ocean"
    assert body["remaining_display"] == "15:00"
    assert fake_clock.duration_ms == 900_000
    assert "audio.start_ambient:ocean" in calls


def test_start_defaults_from_config(client):
    body = client.post("/api/v1/session/start", json={}).json()

    assert body["total_duration_ms"] == 600_000
    assert body["scene"] == "rain"


@pytest.mark.parametrize("minutes", [0, -1, 181])
def test_start_rejects_out_of_range_minutes(client, minutes):
    response = client.post("/api/v1/session/start", json={"minutes": minutes})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_DURATION"


def test_start_rejects_malformed_body(client):
    response = client.post("/api/v1/session/start", json={"minutes": "soon"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_start_rejects_unknown_scene(client):
    response = client.post("/api/v1/session/start", json={"scene": "desert"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "UNKNOWN_SCENE"


def test_invalid_transition_returns_409(client):
    response = client.post("/api/v1/session/pause")

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"] == {"command": "pause", "state": "IDLE"}


def test_start_twice_returns_409(client):
    client.post("/api/v1/session/start", json={})
    response = client.post("/api/v1/session/start", json={})

    assert response.status_code == 409


def test_pause_resume_mute_stop(client):
    client.post("/api/v1/session/start", json={"minutes": 5})

    assert client.post("/api/v1/session/pause").json()["state"] == "PAUSED"
    assert client.post("/api/v1/session/resume").json()["state"] == "ACTIVE"
    assert client.post("/api/v1/session/mute", json={"muted": True}).json()["muted"] is True
    assert client.post("/api/v1/session/restart").json()["muted"] is False
    assert client.post("/api/v1/session/stop").json()["state"] == "IDLE"


def test_dismiss_rejected_without_prompt(client):
    response = client.post("/api/v1/session/dismiss")

    assert response.status_code == 409


def test_timerless_mode_returns_503(event_bus, services):
    services.session_controller = SessionController(event_bus=event_bus, clock=None)

    with TestClient(create_app()) as client:
        health = client.get("/api/health").json()
        response = client.post("/api/v1/session/start", json={})

    assert health["timer_available"] is False
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "TIMER_UNAVAILABLE"


def test_websocket_streams_snapshot_and_events(client):
    with client.websocket_connect("/ws/session") as ws:
        snapshot = ws.receive_json()
        assert snapshot["topic"] == "session:status"
        assert snapshot["data"]["state"] == "IDLE"

        client.post("/api/v1/session/start", json={"minutes": 10, "scene": "forest"})

        message = ws.receive_json()
        assert message == {
            "topic": "session:start",
            "data": {"duration_ms": 600_000, "scene": "forest"},
        }


class IdleWebSocket:
    """Accepts, records sends and never receives anything."""

    client = "test-client"

    def __init__(self):
        self.sent = []

    async def accept(self):
        pass

    async def receive_text(self):
        await asyncio.Event().wait()

    async def send_json(self, message):
        self.sent.append(message)


@pytest.mark.asyncio
async def test_websocket_endpoint_cancel_releases_tasks_and_subscriptions(services, event_bus):
    websocket = IdleWebSocket()
    before = asyncio.all_tasks()
    endpoint = asyncio.create_task(websocket_session_endpoint(websocket, services))
    await settle()

    assert websocket.sent[0]["topic"] == "session:status"
    assert event_bus.subscriber_count(EventType.TIMER_TICK) == 1

    endpoint.cancel()
    with pytest.raises(asyncio.CancelledError):
        await endpoint
    await settle()

    leftover = [t for t in asyncio.all_tasks() - before if not t.done()]
    assert leftover == []
    assert event_bus.subscriber_count(EventType.TIMER_TICK) == 0
