"""
Tests for API layer.

Tests:
- API service methods
- HTTP endpoints via FastAPI's TestClient
- Error codes
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from ..api.app import create_app
from ..api.schemas import (
    CreateSessionRequest,
    CreateSimulatedSessionRequest,
    ErrorCode,
    ErrorResponse,
    KnowledgeValue,
    SessionStatus,
    SimulateRequest,
    StrategyName,
    TurnRequest,
)
from ..api.service import APIService
from ..engine_core.errors import GameConfigurationError


def tracked_request(**overrides) -> CreateSessionRequest:
    """Anna, Ben and Chris on the small catalog; Anna holds r1 and s1."""
    values = dict(
        catalog="small",
        players=["Anna", "Ben", "Chris"],
        viewpoint_position=0,
        own_cards=["r1", "s1"],
    )
    values.update(overrides)
    return CreateSessionRequest(**values)


class TestSchemas:
    """Tests for request validation."""

    def test_turn_needs_three_cards(self):
        with pytest.raises(ValidationError):
            TurnRequest(asking_position=0, cards=["r1", "s1"])

    def test_session_needs_two_players(self):
        with pytest.raises(ValidationError):
            tracked_request(players=["Anna"])

    def test_simulated_defaults(self):
        request = CreateSimulatedSessionRequest()
        assert request.players == ["Anna", "Ben", "Chris", "Daniel", "Emil"]
        assert request.strategy == StrategyName.EVALUATION_BASED

    def test_error_response_dump(self):
        data = ErrorResponse(error="nope", error_code=ErrorCode.SESSION_NOT_FOUND).model_dump(mode="json")
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["api_version"] == "v1"


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService(default_catalog="small")

    def test_create_session(self, service):
        response = service.create_session(tracked_request())

        assert response.status == SessionStatus.ACTIVE
        assert [p.name for p in response.players] == ["Anna", "Ben", "Chris"]
        assert response.players[0].is_viewpoint
        assert not response.simulated

    def test_unknown_own_card(self, service):
        with pytest.raises(KeyError):
            service.create_session(tracked_request(own_cards=["attic"]))

    def test_viewpoint_out_of_range(self, service):
        with pytest.raises(GameConfigurationError):
            service.create_session(tracked_request(viewpoint_position=5))

    def test_get_nonexistent_session(self, service):
        response = service.get_session("nonexistent-id")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_turns_and_evaluation(self, service):
        session_id = service.create_session(tracked_request()).session_id

        turn = service.add_turn(session_id, TurnRequest(
            asking_position=0,
            cards=["t1", "r2", "s2"],
            answering_position=1,
            answer_cards=["t1"],
        ))
        evaluation = service.get_evaluation(session_id)

        assert turn.turn.sequence_number == 0
        assert turn.turn.cards == ["r2", "s2", "t1"]
        t1_row = next(row for row in evaluation.matrix if row.card_id == "t1")
        assert t1_row.values == [KnowledgeValue.NO, KnowledgeValue.YES, KnowledgeValue.NO]
        assert evaluation.turn_count == 1

    def test_unanswered_turn_solves(self, service):
        session_id = service.create_session(tracked_request()).session_id
        service.add_turn(session_id, TurnRequest(asking_position=0, cards=["r2", "s2", "t1"]))

        evaluation = service.get_evaluation(session_id, render=True)

        assert evaluation.solution_found
        assert evaluation.status == SessionStatus.SOLVED
        assert [card.card_id for card in evaluation.solution_cards] == ["r2", "s2", "t1"]
        assert "[Where]" in evaluation.rendered

    def test_answer_cards_without_answerer(self, service):
        session_id = service.create_session(tracked_request()).session_id
        with pytest.raises(ValueError):
            service.add_turn(session_id, TurnRequest(
                asking_position=0, cards=["r2", "s2", "t1"], answer_cards=["t1"],
            ))

    def test_self_answer_rejected(self, service):
        session_id = service.create_session(tracked_request()).session_id
        with pytest.raises(ValueError):
            service.add_turn(session_id, TurnRequest(
                asking_position=1, cards=["r2", "s2", "t1"], answering_position=1, answer_cards=["t1"],
            ))

    def test_simulate(self, service):
        session = service.create_simulated_session(CreateSimulatedSessionRequest(
            catalog="small", players=["Anna", "Ben", "Chris"], seed=3,
        ))

        response = service.simulate(session.session_id, SimulateRequest(rounds=5))

        assert response.rounds_played == len(response.turns)
        assert 1 <= response.rounds_played <= 5
        assert response.turns[0].asking_player == "Anna"
        if response.evaluation.solution_found:
            expected = {card.card_id for card in response.expected_solution}
            assert {card.card_id for card in response.evaluation.solution_cards} == expected
        else:
            assert response.expected_solution is None

    def test_simulate_tracked_session(self, service):
        session_id = service.create_session(tracked_request()).session_id
        response = service.simulate(session_id, SimulateRequest())
        assert response.error_code == ErrorCode.NOT_SIMULATED

    def test_rounds_capped(self):
        service = APIService(default_catalog="standard", max_rounds=2)
        session = service.create_simulated_session(CreateSimulatedSessionRequest(seed=1))
        response = service.simulate(session.session_id, SimulateRequest(rounds=50))
        assert response.rounds_played == 2

    def test_describe_catalog(self, service):
        response = service.describe_catalog("standard")
        assert response.count == 21
        assert response.cards[0].category == "ROOM"


class TestHTTP:
    """Tests for the FastAPI endpoints."""

    @pytest.fixture
    def client(self):
        return TestClient(create_app(APIService(default_catalog="small")))

    @pytest.fixture
    def session_id(self, client):
        response = client.post("/api/v1/sessions", json={
            "players": ["Anna", "Ben", "Chris"],
            "own_cards": ["r1", "s1"],
        })
        assert response.status_code == 200
        return response.json()["session_id"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_session_lifecycle(self, client, session_id):
        assert client.get(f"/api/v1/sessions/{session_id}").json()["status"] == "active"
        assert session_id in client.get("/api/v1/sessions").json()["sessions"]

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json()["success"] is True

        response = client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_record_turn_and_evaluate(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/turns", json={
            "asking_position": 0,
            "cards": ["r2", "s2", "t1"],
        })
        assert response.status_code == 200

        evaluation = client.get(f"/api/v1/sessions/{session_id}/evaluation").json()
        assert evaluation["solution_found"] is True
        assert evaluation["status"] == "solved"
        assert [p["name"] for p in evaluation["players"]] == ["Anna", "Ben", "Chris"]

    def test_unknown_card_in_turn(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/turns", json={
            "asking_position": 0,
            "cards": ["r2", "s2", "attic"],
        })
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TURN"

    def test_invalid_question_shape(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/turns", json={
            "asking_position": 0,
            "cards": ["r2", "r3", "t1"],
        })
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TURN"

    def test_inconsistent_turns(self, client, session_id):
        """Ben cannot have shown Anna's own card."""
        client.post(f"/api/v1/sessions/{session_id}/turns", json={
            "asking_position": 0,
            "cards": ["r1", "s2", "t1"],
            "answering_position": 1,
            "answer_cards": ["r1"],
        })
        response = client.get(f"/api/v1/sessions/{session_id}/evaluation")
        assert response.status_code == 409
        assert response.json()["error_code"] == "INCONSISTENT_KNOWLEDGE"
        assert response.json()["details"]["card"] == "r1"

    def test_invalid_configuration(self, client):
        response = client.post("/api/v1/sessions", json={
            "players": ["Anna", "Ben"],
            "own_cards": ["r1"],
            "leftover_cards": ["r1"],
        })
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_CONFIGURATION"

    def test_unknown_catalog(self, client):
        response = client.post("/api/v1/sessions", json={
            "catalog": "/nonexistent/cards.json",
            "players": ["Anna", "Ben"],
            "own_cards": ["r1"],
        })
        assert response.status_code == 404
        assert response.json()["error_code"] == "CATALOG_ERROR"

    def test_request_validation(self, client):
        response = client.post("/api/v1/sessions", json={"players": ["Anna"]})
        assert response.status_code == 422

    def test_simulated_session(self, client):
        response = client.post("/api/v1/sessions/simulated", json={
            "players": ["Anna", "Ben", "Chris"],
            "seed": 12,
        })
        assert response.status_code == 200
        session_id = response.json()["session_id"]
        assert response.json()["simulated"] is True

        response = client.post(f"/api/v1/sessions/{session_id}/simulate", json={"rounds": 3})
        assert response.status_code == 200
        assert response.json()["rounds_played"] >= 1

    def test_simulate_without_body(self, client):
        session_id = client.post("/api/v1/sessions/simulated", json={
            "players": ["Anna", "Ben", "Chris"],
        }).json()["session_id"]
        response = client.post(f"/api/v1/sessions/{session_id}/simulate")
        assert response.status_code == 200
        assert response.json()["rounds_played"] == 1

    def test_simulate_tracked_session(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/simulate", json={"rounds": 1})
        assert response.status_code == 400
        assert response.json()["error_code"] == "NOT_SIMULATED"

    def test_catalog(self, client):
        response = client.get("/api/v1/catalogs/small")
        assert response.status_code == 200
        assert response.json()["count"] == 9

        response = client.get("/api/v1/catalogs/deluxe")
        assert response.status_code == 404
        assert response.json()["error_code"] == "CATALOG_ERROR"
