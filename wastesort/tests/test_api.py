"""
Tests for API layer.

Tests:
- API service methods
- Event forwarding to the sink
- HTTP endpoints and error handling
- WebSocket handshake
"""

import time

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import (
    CreateSessionRequest,
    DropRequest,
    ErrorCode,
    ErrorResponse,
    SelectItemRequest,
    SessionStatus,
)
from ..api.service import APIService
from ..engine_core.errors import ConfigurationError
from ..session import SessionConfig, SessionManager


class MessageRecorder:
    """Event sink that keeps every message."""

    def __init__(self):
        self.messages: list[tuple[str, dict]] = []

    def __call__(self, session_id: str, message: dict) -> None:
        self.messages.append((session_id, message))

    def types(self) -> list[str]:
        return [message["type"] for _, message in self.messages]


@pytest.fixture
def recorder():
    return MessageRecorder()


@pytest.fixture
def service(recorder):
    """Service on virtual time with a fixed seed."""
    return APIService(
        session_manager=SessionManager(),
        base_config=SessionConfig(random_seed=5),
        event_sink=recorder,
    )


def scheduler_of(service, session_id):
    return service.session_manager.get_session(session_id).controller.scheduler


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self, service):
        response = service.create_session(CreateSessionRequest(player_name="Test Player"))
        assert response.session_id is not None
        assert response.status == SessionStatus.ACTIVE
        assert response.player_name == "Test Player"
        assert response.time_remaining_seconds == 60
        assert len(response.items) == 1
        assert response.items[0].state == "spawned"

    def test_create_pool_session(self, service):
        response = service.create_session(CreateSessionRequest(mode="pool", pool_capacity=12))
        assert response.mode == "pool"
        assert len(response.items) == 8

    def test_invalid_config_raises(self, service):
        request = CreateSessionRequest(
            bins=[{"bin_type": "recycling", "accepted_categories": ["plastic"]}],
        )
        with pytest.raises(ConfigurationError):
            service.create_session(request)
        assert service.list_sessions() == []

    def test_select_and_drop(self, service):
        """Correct drop scores and returns the new state."""
        created = service.create_session(CreateSessionRequest(categories=["plastic"]))
        session_id = created.session_id

        selected = service.select_item(session_id, SelectItemRequest(item_id=1))
        assert selected.selected is True
        assert selected.selected_item_id == 1

        response = service.drop(session_id, DropRequest(bin_type="recycling"))
        assert response.resolved is True
        assert response.round.correct is True
        assert response.round.points_awarded == 100
        assert response.round.message == "Correct! +100 points"
        assert response.session.score == 100
        assert [item.item_id for item in response.session.items] == [2]

    def test_drop_without_selection(self, service):
        created = service.create_session(CreateSessionRequest())
        response = service.drop(created.session_id, DropRequest(bin_type="landfill"))
        assert response.resolved is False
        assert response.round is None
        assert response.session.score == 0

    def test_unknown_session(self, service):
        for response in (
            service.get_session("missing"),
            service.select_item("missing", SelectItemRequest(item_id=1)),
            service.drop("missing", DropRequest(bin_type="compost")),
            service.restart("missing"),
            service.list_bins("missing"),
        ):
            assert isinstance(response, ErrorResponse)
            assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_session_ends(self, service):
        created = service.create_session(CreateSessionRequest(session_duration_seconds=5))
        scheduler_of(service, created.session_id).advance(5.0)
        response = service.get_session(created.session_id)
        assert response.status == SessionStatus.ENDED
        assert response.time_remaining_seconds == 0

    def test_restart(self, service):
        created = service.create_session(CreateSessionRequest(categories=["organic"]))
        session_id = created.session_id
        service.select_item(session_id, SelectItemRequest(item_id=1))
        service.drop(session_id, DropRequest(bin_type="compost"))
        scheduler_of(service, session_id).advance(10.0)

        response = service.restart(session_id)
        assert response.score == 0
        assert response.time_remaining_seconds == 60
        assert [item.item_id for item in response.items] == [1]

    def test_list_bins(self, service):
        bins = service.list_bins().bins
        assert [b.bin_type.value for b in bins] == ["recycling", "compost", "hazardous", "landfill"]
        assert bins[0].label == "RECYCLE"

    def test_end_session(self, service):
        created = service.create_session(CreateSessionRequest())
        assert service.end_session(created.session_id) is True
        assert service.end_session(created.session_id) is False

    def test_cleanup_stale_sessions(self, service):
        """Only ended sessions past the age limit are dropped."""
        ended = service.create_session(CreateSessionRequest(session_duration_seconds=1))
        running = service.create_session(CreateSessionRequest())
        scheduler_of(service, ended.session_id).advance(1.0)
        for session_id in (ended.session_id, running.session_id):
            service.session_manager.get_session(session_id).created_at -= 7200

        assert service.cleanup_stale_sessions(max_age_seconds=3600) == [ended.session_id]
        assert service.list_sessions() == [running.session_id]
        assert service.cleanup_stale_sessions(max_age_seconds=3600) == []


class TestEventForwarding:
    """Tests for listener -> sink messages."""

    def test_start_messages(self, service, recorder):
        created = service.create_session(CreateSessionRequest())
        assert recorder.types() == ["score_changed", "time_changed", "items_changed"]
        assert all(sid == created.session_id for sid, _ in recorder.messages)
        items = recorder.messages[-1][1]["payload"]["items"]
        assert items[0]["item_id"] == 1

    def test_tick_messages(self, service, recorder):
        created = service.create_session(CreateSessionRequest())
        recorder.messages.clear()
        scheduler_of(service, created.session_id).advance(2.0)
        assert recorder.messages[-1][1] == {
            "type": "time_changed",
            "payload": {"time_remaining_seconds": 58},
        }

    def test_drop_messages(self, service, recorder):
        created = service.create_session(CreateSessionRequest(categories=["metal"]))
        service.select_item(created.session_id, SelectItemRequest(item_id=1))
        recorder.messages.clear()
        service.drop(created.session_id, DropRequest(bin_type="hazardous"))
        assert recorder.types() == [
            "round_resolved",
            "score_changed",
            "items_changed",
            "items_changed",
        ]
        assert recorder.messages[0][1]["payload"] == {
            "item_id": 1,
            "correct": False,
            "points_awarded": 0,
        }

    def test_end_message(self, service, recorder):
        created = service.create_session(CreateSessionRequest(session_duration_seconds=2))
        scheduler_of(service, created.session_id).advance(2.0)
        assert recorder.messages[-1][1] == {
            "type": "session_ended",
            "payload": {"final_score": 0, "correct_count": 0, "incorrect_count": 0},
        }


class TestHTTPEndpoints:
    """Tests for the FastAPI app."""

    @pytest.fixture
    def client(self):
        service = APIService(
            session_manager=SessionManager(),
            base_config=SessionConfig(random_seed=5),
        )
        return TestClient(create_app(service))

    def create(self, client, **body):
        response = client.post("/api/v1/sessions", json=body)
        assert response.status_code == 200
        return response.json()

    def test_create_and_get(self, client):
        created = self.create(client, mode="pool")
        assert len(created["items"]) == 8

        response = client.get(f"/api/v1/sessions/{created['session_id']}")
        assert response.status_code == 200
        assert response.json()["status"] == "active"

        listing = client.get("/api/v1/sessions").json()
        assert listing == {"sessions": [created["session_id"]], "count": 1}

    def test_invalid_config(self, client):
        response = client.post("/api/v1/sessions", json={
            "bins": [{"bin_type": "compost", "accepted_categories": ["organic"]}],
        })
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_CONFIG"
        assert "Category 'plastic' is not accepted by any bin" in data["details"]["errors"]

    def test_validation_error(self, client):
        response = client.post("/api/v1/sessions", json={"session_duration_seconds": 0})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_session_not_found(self, client):
        response = client.get("/api/v1/sessions/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

        response = client.post("/api/v1/sessions/missing/drop", json={"bin_type": "compost"})
        assert response.status_code == 404

    def test_play_round(self, client):
        created = self.create(client, categories=["electronics"])
        session_id = created["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/select", json={"item_id": 1})
        assert response.json()["selected"] is True

        response = client.post(f"/api/v1/sessions/{session_id}/drop", json={"bin_type": "hazardous"})
        data = response.json()
        assert data["resolved"] is True
        assert data["round"]["correct"] is True
        assert data["round"]["category"] == "electronics"
        assert data["session"]["score"] == 100
        assert data["session"]["accuracy"] == 100

    def test_restart_and_end(self, client):
        session_id = self.create(client)["session_id"]
        response = client.post(f"/api/v1/sessions/{session_id}/restart")
        assert response.status_code == 200
        assert response.json()["score"] == 0

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json() == {"success": True, "session_id": session_id}
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_bins(self, client):
        data = client.get("/api/v1/bins").json()
        assert data["bins"][1] == {
            "bin_type": "compost",
            "label": "COMPOST",
            "description": "Food Waste",
            "accepted_categories": ["organic"],
        }
        session_id = self.create(client)["session_id"]
        assert client.get(f"/api/v1/sessions/{session_id}/bins").json() == data

    def test_health(self, client):
        response = client.get("/health")
        assert response.json()["status"] == "healthy"
        assert client.get("/").json()["health"] == "/health"

    def test_websocket_handshake(self, client):
        session_id = self.create(client)["session_id"]
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "session_state"
            assert message["payload"]["session_id"] == session_id

            websocket.send_text('{"type": "ping"}')
            assert websocket.receive_json() == {"type": "pong"}

            websocket.send_text("not json")
            assert websocket.receive_json()["type"] == "error"

    def test_websocket_unknown_session(self, client):
        with client.websocket_connect("/api/v1/sessions/missing/ws") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "SESSION_NOT_FOUND"

    def test_unexpected_error(self):
        """Unhandled exceptions become a 500 with INTERNAL_ERROR."""

        class BrokenService(APIService):
            def get_session(self, session_id):
                raise RuntimeError("boom")

        service = BrokenService(session_manager=SessionManager())
        client = TestClient(create_app(service), raise_server_exceptions=False)
        response = client.get("/api/v1/sessions/anything")
        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert "boom" not in data["error"]


class TestStaleSessionSweep:
    """Tests for the periodic cleanup started by the app lifespan."""

    def test_ended_sessions_are_swept(self, service):
        ended = service.create_session(CreateSessionRequest(session_duration_seconds=1))
        running = service.create_session(CreateSessionRequest())
        scheduler_of(service, ended.session_id).advance(1.0)

        app = create_app(service, cleanup_interval_seconds=0.01, session_max_age_seconds=0)
        with TestClient(app) as client:
            deadline = time.monotonic() + 2.0
            while ended.session_id in service.list_sessions() and time.monotonic() < deadline:
                time.sleep(0.02)
            assert service.list_sessions() == [running.session_id]
            assert client.get(f"/api/v1/sessions/{ended.session_id}").status_code == 404
            assert client.get(f"/api/v1/sessions/{running.session_id}").status_code == 200

        # Shutdown closes whatever is left
        assert service.list_sessions() == []
