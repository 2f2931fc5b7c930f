"""
Tests for API layer.

Tests:
- API service methods
- Match lifecycle via HTTP
- Error handling
- WebSocket state feed
"""

import pytest

from ..api.app import create_app
from ..api.schemas import (
    CreateMatchRequest,
    ParticipantInfo,
    RollDicePayload,
    SowPayload,
    StartGamePayload,
    UpdatePlayersRequest,
)
from ..api.service import APIService
from ..config import PacingConfig
from ..exceptions import InvalidActionPayload, MatchNotFound
from ..session import SessionManager

PLAYERS = [
    {"participant_id": "alice", "name": "Alice"},
    {"participant_id": "bob", "name": "Bob"},
]


@pytest.fixture
def service():
    """Service with headless pacing, so follow-ups run immediately."""
    return APIService(session_manager=SessionManager(pacing=PacingConfig.headless()))


def create(service, game_type):
    return service.create_match(CreateMatchRequest(
        game_type=game_type,
        host_id="alice",
        players=[ParticipantInfo(**p) for p in PLAYERS],
        seed=1,
    ))


class TestAPIService:
    """Tests for APIService."""

    def test_create_race_match(self, service):
        match = create(service, "race")

        assert match.match_id
        assert match.host_id == "alice"
        assert match.state.game_type == "race"
        assert match.state.players[1].participant_id == "bob"

    def test_get_missing_match(self, service):
        with pytest.raises(MatchNotFound):
            service.get_match("nonexistent-id")

    def test_illegal_action_leaves_state(self, service):
        match = create(service, "race")
        service.submit_action(match.match_id, StartGamePayload())

        state = service.submit_action(match.match_id, RollDicePayload(actor="bob"))

        assert state.current_seat == 0
        assert state.dice_value is None

    def test_roll_resolves(self, service):
        match = create(service, "race")
        service.submit_action(match.match_id, StartGamePayload())

        state = service.submit_action(match.match_id, RollDicePayload(actor="alice"))

        # Either a six is waiting to be played or the turn has already passed
        assert (state.dice_value == 6 and state.current_seat == 0) or \
            (state.dice_value is None and state.current_seat == 1)

    def test_sowing_move(self, service):
        match = create(service, "sowing")
        service.submit_action(match.match_id, StartGamePayload())

        state = service.submit_action(
            match.match_id, SowPayload(actor="alice", cell=9, side="left")
        )

        assert state.board == [11, 6, 6, 0, 6, 6, 11, 6, 6, 0, 0, 6]
        assert state.scores["alice"] == 6
        assert state.last_move.steps[0].kind == "pickup"

    def test_sowing_bad_side_ignored(self, service):
        match = create(service, "sowing")
        service.submit_action(match.match_id, StartGamePayload())

        state = service.submit_action(match.match_id, SowPayload(actor="alice", cell=9, side="up"))
        assert state.current_turn == "alice"
        assert state.last_move is None

    def test_raw_action(self, service):
        match = create(service, "race")
        state = service.submit_raw_action(match.match_id, {"action": {"type": "start_game"}})
        assert state.phase == "playing"

        with pytest.raises(InvalidActionPayload):
            service.submit_raw_action(match.match_id, {"action": {"type": "jump"}})

    def test_update_players(self, service):
        match = create(service, "race")
        state = service.update_players(match.match_id, UpdatePlayersRequest(
            players=[ParticipantInfo(participant_id="carol", name="Carol")]
        ))
        assert state.players[0].participant_id == "carol"
        assert state.players[1].participant_id is None

    def test_subscribe_delivers_json(self, service):
        match = create(service, "race")
        received = []
        unsubscribe = service.subscribe(match.match_id, received.append)

        service.submit_action(match.match_id, StartGamePayload())
        unsubscribe()
        service.submit_action(match.match_id, RollDicePayload(actor="alice"))

        assert len(received) == 1
        assert received[0]["phase"] == "playing"
        assert received[0]["game_type"] == "race"

    def test_end_match(self, service):
        match = create(service, "race")
        assert service.end_match(match.match_id)
        assert service.list_matches() == []
        assert not service.end_match(match.match_id)


class TestHTTP:
    """Tests for the FastAPI app."""

    @pytest.fixture
    def client(self, service):
        from fastapi.testclient import TestClient
        return TestClient(create_app(service))

    @pytest.fixture
    def match_id(self, client):
        response = client.post("/api/v1/matches", json={
            "game_type": "race",
            "host_id": "alice",
            "players": PLAYERS,
        })
        assert response.status_code == 200
        return response.json()["match_id"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_and_get(self, client, match_id):
        response = client.get(f"/api/v1/matches/{match_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["game_type"] == "race"
        assert data["state"]["phase"] == "waiting"

    def test_list(self, client, match_id):
        data = client.get("/api/v1/matches").json()
        assert data["matches"] == [match_id]
        assert data["count"] == 1

    def test_unknown_game_type(self, client):
        response = client.post("/api/v1/matches", json={"game_type": "chess"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_missing_match(self, client):
        response = client.get("/api/v1/matches/missing/state")
        assert response.status_code == 404
        assert response.json()["error_code"] == "MATCH_NOT_FOUND"

    def test_post_action(self, client, match_id):
        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"action": {"type": "start_game"}},
        )
        assert response.status_code == 200
        assert response.json()["phase"] == "playing"

    def test_illegal_action_is_not_an_error(self, client, match_id):
        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"action": {"type": "roll_dice", "actor": "bob"}},
        )
        assert response.status_code == 200
        assert response.json()["phase"] == "waiting"

    def test_malformed_action(self, client, match_id):
        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"action": {"type": "fly"}},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_update_players(self, client, match_id):
        response = client.put(
            f"/api/v1/matches/{match_id}/players",
            json={"players": [{"participant_id": "carol", "name": "Carol"}]},
        )
        assert response.status_code == 200
        assert response.json()["players"][0]["name"] == "Carol"

    def test_end_match(self, client, match_id):
        response = client.delete(f"/api/v1/matches/{match_id}")
        assert response.json() == {"success": True, "match_id": match_id}
        assert client.get(f"/api/v1/matches/{match_id}").status_code == 404

    def test_websocket_feed(self, client, match_id):
        with client.websocket_connect(f"/api/v1/matches/{match_id}/ws") as ws:
            initial = ws.receive_json()
            assert initial["type"] == "state_update"
            assert initial["payload"]["phase"] == "waiting"

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

            ws.send_json({"type": "action", "action": {"type": "start_game"}})
            update = ws.receive_json()
            assert update["type"] == "state_update"
            assert update["payload"]["phase"] == "playing"

    def test_websocket_disconnect_releases_feed(self, client, service, match_id):
        with client.websocket_connect(f"/api/v1/matches/{match_id}/ws") as ws:
            ws.receive_json()

        dispatcher = service.session_manager.require_session(match_id).dispatcher
        assert dispatcher._subscribers == []

        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"action": {"type": "start_game"}},
        )
        assert response.json()["phase"] == "playing"

    def test_websocket_bad_action(self, client, match_id):
        with client.websocket_connect(f"/api/v1/matches/{match_id}/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "action", "action": {"type": "warp"}})
            message = ws.receive_json()
            assert message["type"] == "error"

    def test_websocket_missing_match(self, client):
        with client.websocket_connect("/api/v1/matches/missing/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "MATCH_NOT_FOUND"
